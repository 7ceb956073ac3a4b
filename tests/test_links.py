"""
Unit tests for the filesystem link driver.
"""

import os
from urllib.parse import unquote

import pytest

from core.errors import LinkConflictError
from core.models.workspace import LinkStatus
from core.workspace.links import FilesystemWorkspaceLinks, link_name, workspace_links_dir


@pytest.fixture
def workspace(tmp_path):
    return tmp_path / "ws"


@pytest.fixture
def links(workspace):
    return FilesystemWorkspaceLinks(workspace)


@pytest.fixture
def project_dir(tmp_path):
    path = tmp_path / "repo1"
    path.mkdir()
    return str(path)


class TestLinkNames:
    """Test link naming"""

    def test_links_dir(self, workspace):
        assert workspace_links_dir(workspace) == os.path.join(str(workspace), "projects", "links")

    def test_id_encoded_as_single_component(self):
        assert link_name("/abs/repo1") == "%2Fabs%2Frepo1"

    def test_link_name_decodes_to_id(self, links):
        """Test entries in the links directory map back to project ids"""
        project_id = "/abs/my repo%1"

        name = os.path.basename(links.link_path(project_id))

        assert name != project_id
        assert unquote(name) == project_id

    def test_plain_id_unchanged(self):
        assert link_name("repo1") == "repo1"

    @pytest.mark.parametrize("bad_id", ["", ".", ".."])
    def test_unusable_ids_rejected(self, bad_id):
        with pytest.raises(ValueError):
            link_name(bad_id)

    def test_nested_projects_get_sibling_links(self, links):
        """Test a project inside another project does not nest its link"""
        outer = links.link_path("/abs")
        inner = links.link_path("/abs/repo1")

        assert os.path.dirname(outer) == os.path.dirname(inner) == links.links_dir


class TestInspect:
    """Test inspect()"""

    def test_missing(self, links, project_dir):
        report = links.inspect(project_dir, project_dir)

        assert report.status == LinkStatus.MISSING
        assert report.current_target is None
        assert report.project_path == project_dir
        assert report.link_path == links.link_path(project_dir)

    def test_ok(self, links, project_dir):
        os.makedirs(links.links_dir)
        os.symlink(project_dir, links.link_path(project_dir))

        report = links.inspect(project_dir, project_dir)

        assert report.status == LinkStatus.OK
        assert report.current_target == project_dir

    def test_ok_ignores_trailing_separator(self, links, project_dir):
        os.makedirs(links.links_dir)
        os.symlink(project_dir + "/", links.link_path(project_dir))

        assert links.inspect(project_dir, project_dir).status == LinkStatus.OK

    def test_broken(self, links, project_dir, tmp_path):
        os.makedirs(links.links_dir)
        elsewhere = str(tmp_path / "elsewhere")
        os.symlink(elsewhere, links.link_path(project_dir))

        report = links.inspect(project_dir, project_dir)

        assert report.status == LinkStatus.BROKEN
        assert report.current_target == elsewhere

    def test_dangling_symlink_to_project_is_ok(self, links, tmp_path):
        """Test only the stored target is compared, not its existence"""
        gone = str(tmp_path / "gone")
        os.makedirs(links.links_dir)
        os.symlink(gone, links.link_path(gone))

        assert links.inspect(gone, gone).status == LinkStatus.OK

    def test_conflict_file(self, links, project_dir):
        os.makedirs(links.links_dir)
        with open(links.link_path(project_dir), "w") as f:
            f.write("not a link")

        report = links.inspect(project_dir, project_dir)

        assert report.status == LinkStatus.CONFLICT
        assert report.current_target is None

    def test_conflict_directory(self, links, project_dir):
        os.makedirs(links.link_path(project_dir))

        assert links.inspect(project_dir, project_dir).status == LinkStatus.CONFLICT

    def test_inspect_does_not_write(self, links, workspace, project_dir):
        links.inspect(project_dir, project_dir)

        assert not workspace.exists()


class TestEnsure:
    """Test ensure()"""

    def test_creates_link(self, links, project_dir):
        links.ensure(project_dir, project_dir)

        assert os.readlink(links.link_path(project_dir)) == project_dir
        assert links.inspect(project_dir, project_dir).status == LinkStatus.OK

    def test_creates_links_dir_with_mode(self, links, project_dir):
        old_umask = os.umask(0)
        try:
            links.ensure(project_dir, project_dir)
        finally:
            os.umask(old_umask)

        assert os.stat(links.links_dir).st_mode & 0o777 == 0o750

    def test_repoints_broken_link(self, links, project_dir, tmp_path):
        os.makedirs(links.links_dir)
        os.symlink(str(tmp_path / "elsewhere"), links.link_path(project_dir))

        links.ensure(project_dir, project_dir)

        assert os.readlink(links.link_path(project_dir)) == project_dir

    def test_ensure_is_idempotent(self, links, project_dir):
        links.ensure(project_dir, project_dir)
        links.ensure(project_dir, project_dir)

        assert links.inspect(project_dir, project_dir).status == LinkStatus.OK

    def test_conflict_never_removed(self, links, project_dir):
        link_path = links.link_path(project_dir)
        os.makedirs(links.links_dir)
        with open(link_path, "w") as f:
            f.write("keep me")

        with pytest.raises(LinkConflictError, match="non-symlink at link path") as exc_info:
            links.ensure(project_dir, project_dir)

        assert exc_info.value.link_path == link_path
        with open(link_path) as f:
            assert f.read() == "keep me"

    def test_target_need_not_exist(self, links, tmp_path):
        target = str(tmp_path / "not-there")

        links.ensure(target, target)

        assert os.path.islink(links.link_path(target))
