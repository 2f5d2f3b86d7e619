import shutil
import tempfile
import unittest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from codegen_harness import CleanupRegistry, Workspace, WorkspaceError


class WorkspaceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_root = Path(tempfile.mkdtemp(prefix="workspace-test-"))
        self.addCleanup(shutil.rmtree, self.temp_root, True)
        self.registry = CleanupRegistry()

    def test_creates_unique_directory_under_temp_root(self) -> None:
        first = Workspace.create(temp_root=self.temp_root, registry=self.registry)
        second = Workspace.create(temp_root=self.temp_root, registry=self.registry)

        self.assertTrue(first.exists())
        self.assertTrue(second.exists())
        self.assertNotEqual(first.root, second.root)
        self.assertEqual(first.root.parent, self.temp_root)
        self.assertTrue(first.root.name.startswith("codegen-"))
        self.assertEqual(self.registry.pending(), 2)

    def test_concurrent_creation_never_collides(self) -> None:
        with ThreadPoolExecutor(max_workers=8) as pool:
            workspaces = list(
                pool.map(
                    lambda _: Workspace.create(temp_root=self.temp_root, registry=self.registry),
                    range(64),
                )
            )

        self.assertEqual(len({workspace.root for workspace in workspaces}), 64)
        self.assertEqual(self.registry.pending(), 64)

    def test_registered_cleanup_removes_the_whole_tree(self) -> None:
        workspace = Workspace.create(temp_root=self.temp_root, registry=self.registry)
        workspace.write_file("com/example/address.py", "STREET = 'Main'\n")

        self.registry.run_all()

        self.assertFalse(workspace.root.exists())
        self.assertEqual(list(self.temp_root.iterdir()), [])

    def test_cleanup_tolerates_an_already_deleted_workspace(self) -> None:
        workspace = Workspace.create(temp_root=self.temp_root, registry=self.registry)
        workspace.cleanup()
        workspace.cleanup()

        self.registry.run_all()

        self.assertFalse(workspace.exists())

    def test_creation_failure_is_fatal_but_still_registered(self) -> None:
        missing_root = self.temp_root / "does-not-exist"

        with self.assertRaises(WorkspaceError):
            Workspace.create(temp_root=missing_root, registry=self.registry)

        self.assertEqual(self.registry.pending(), 1)
        self.registry.run_all()

    def test_files_can_be_written_read_and_listed(self) -> None:
        workspace = Workspace.create(
            temp_root=self.temp_root, prefix="files-", registry=self.registry
        )
        workspace.write_file("pkg/b.py", "B = 2\n")
        workspace.write_file("pkg/a.py", "A = 1\n")

        self.assertTrue(workspace.root.name.startswith("files-"))
        self.assertEqual(workspace.read_file("pkg/a.py"), "A = 1\n")
        self.assertEqual(
            [path.name for path in workspace.iter_files("*.py")],
            ["a.py", "b.py"],
        )


if __name__ == "__main__":
    unittest.main()
