from click.testing import CliRunner

import release_tagger.cli as cli
from release_tagger.errors import ConcurrentModificationError, DuplicateTagError
from release_tagger.vcs.git_client import GitError


def install_fake(monkeypatch, repo, root):
    seen = {}

    class FakeGitClient:
        @staticmethod
        def find_repo_root(start):
            return root

        def __new__(cls, repo_root, dry_run=False, echo=None):
            seen.update(repo_root=repo_root, dry_run=dry_run)
            return repo

    monkeypatch.setattr(cli, "GitClient", FakeGitClient)
    return seen


def invoke(input_text="", env=None):
    runner = CliRunner()
    environment = {"UPSTREAM_REMOTE": "", "DRY_RUN": ""}
    environment.update(env or {})
    return runner.invoke(cli.main, [], input=input_text, env=environment)


def test_release_with_defaults(monkeypatch, tmp_path, fake_repo):
    seen = install_fake(monkeypatch, fake_repo, tmp_path)
    result = invoke("\n\n\n")
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "Moving major: v1 -> " + fake_repo.head[:7] in result.output
    assert "Semver     : v1.0.0 -> " + fake_repo.head[:7] in result.output
    assert seen == {"repo_root": tmp_path, "dry_run": False}
    assert set(fake_repo.remote["upstream"]) == {"v1", "v1.0.0"}


def test_dry_run_from_environment(monkeypatch, tmp_path, fake_repo):
    seen = install_fake(monkeypatch, fake_repo, tmp_path)
    result = invoke("\n\n\n", env={"DRY_RUN": "1"})
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert seen["dry_run"] is True
    assert "would point to" in result.output


def test_invalid_config(monkeypatch, tmp_path, fake_repo):
    install_fake(monkeypatch, fake_repo, tmp_path)
    result = invoke(env={"DRY_RUN": "yes"})
    assert result.exit_code == cli.EXIT_CONFIG_ERROR
    assert "DRY_RUN" in result.output


def test_not_a_repository(monkeypatch, tmp_path, fake_repo):
    install_fake(monkeypatch, fake_repo, None)
    result = invoke()
    assert result.exit_code == cli.EXIT_PRECONDITION_FAILED
    assert "No Git repository" in result.output


def test_dirty_tree(monkeypatch, tmp_path, fake_repo):
    fake_repo.clean = False
    install_fake(monkeypatch, fake_repo, tmp_path)
    result = invoke()
    assert result.exit_code == cli.EXIT_PRECONDITION_FAILED
    assert "Working tree not clean" in result.output


def test_invalid_major_input(monkeypatch, tmp_path, fake_repo):
    install_fake(monkeypatch, fake_repo, tmp_path)
    result = invoke("latest\n")
    assert result.exit_code == cli.EXIT_VALIDATION_ERROR
    assert "Invalid major tag 'latest'" in result.output


def test_declined_mismatch_is_cancellation(monkeypatch, tmp_path, fake_repo):
    install_fake(monkeypatch, fake_repo, tmp_path)
    result = invoke("v2\nv3.0.0\nn\n")
    assert result.exit_code == cli.EXIT_CANCELLED
    assert fake_repo.remote["upstream"] == {}


def test_concurrent_modification(monkeypatch, tmp_path, fake_repo):
    fake_repo.before_push = lambda repo: repo.set_remote_tag("upstream", "v1", "9" * 40)
    install_fake(monkeypatch, fake_repo, tmp_path)
    result = invoke("\n\n\n")
    assert result.exit_code == cli.EXIT_CONCURRENT_MODIFICATION
    assert "refs/tags/v1" in result.output
    assert "left in place" in result.output


def test_exit_code_mapping():
    assert cli.exit_code_for(DuplicateTagError("v1.0.0")) == cli.EXIT_DUPLICATE_TAG
    assert cli.exit_code_for(ConcurrentModificationError("u", "refs/tags/v1", None)) == cli.EXIT_CONCURRENT_MODIFICATION
    assert cli.exit_code_for(GitError("boom")) == cli.EXIT_VCS_FAILURE
    assert cli.exit_code_for(RuntimeError("boom")) == cli.EXIT_GENERIC_ERROR


def test_unexpected_error(monkeypatch, tmp_path, fake_repo):
    install_fake(monkeypatch, fake_repo, tmp_path)

    def explode():
        raise RuntimeError("kaboom")

    monkeypatch.setattr(fake_repo, "is_working_tree_clean", explode)
    result = invoke()
    assert result.exit_code == cli.EXIT_GENERIC_ERROR
    assert "Unexpected error: kaboom" in result.output


def test_version_option():
    result = CliRunner().invoke(cli.main, ["--version"])
    assert result.exit_code == 0
    assert "tag-release" in result.output


def test_usage_error_uses_click_exit_code():
    result = CliRunner().invoke(cli.main, ["unexpected-argument"])
    assert result.exit_code == 2
    assert "Usage:" in result.output
    assert not hasattr(cli, "EXIT_INVALID_USAGE")
