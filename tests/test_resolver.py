"""Tests for the recursive project lookup and the active-project fallback."""

from file_receiver.core.host_model import SolutionSnapshot
from file_receiver.core.resolver import (
    enumerate_projects,
    find_active_project,
    find_project_by_directory,
    resolve_project,
    same_directory,
)

from conftest import WEBSITE_KIND, make_folder, make_project


def test_find_top_level_project_by_directory(solution_tree, tmp_path):
    project = find_project_by_directory(solution_tree.projects, str(tmp_path / "App"))
    assert project is not None
    assert project.name == "App"


def test_find_project_nested_two_folders_deep(solution_tree, tmp_path):
    project = find_project_by_directory(solution_tree.projects, str(tmp_path / "Integration"))
    assert project is not None
    assert project.name == "Integration"


def test_directory_match_ignores_case_and_trailing_separator(solution_tree, tmp_path):
    target = str(tmp_path / "Tests").upper() + "/"
    project = find_project_by_directory(solution_tree.projects, target)
    assert project is not None
    assert project.name == "Tests"


def test_unknown_directory_is_not_found(solution_tree):
    assert find_project_by_directory(solution_tree.projects, "/no/such/dir") is None
    assert find_project_by_directory(solution_tree.projects, "") is None


def test_deep_nesting_has_no_fixed_limit(tmp_path):
    leaf = make_project(tmp_path, "Deep")
    node = leaf
    for depth in range(25):
        node = make_folder(f"level{depth}", node)
    project = find_project_by_directory([node], str(tmp_path / "Deep"))
    assert project is leaf


def test_same_directory_rejects_empty():
    assert not same_directory("", "")
    assert same_directory("/a/b", "/A/B")


def test_enumerate_skips_folders_and_missing_directories(solution_tree):
    names = [p.name for p in enumerate_projects(solution_tree.projects)]
    assert names == ["App", "Tests", "Integration"]


def test_enumerate_is_repeatable(solution_tree):
    first = enumerate_projects(solution_tree.projects)
    second = enumerate_projects(solution_tree.projects)
    assert first == second


def test_descriptor_wire_fields(solution_tree, tmp_path):
    descriptor = enumerate_projects(solution_tree.projects)[0]
    assert descriptor.to_dict() == {
        "name": "App",
        "directory": str(tmp_path / "App"),
        "fullName": str(tmp_path / "App" / "App.csproj"),
    }


def test_active_project_prefers_selection(solution_tree, tmp_path):
    solution_tree.selected_project = str(tmp_path / "Integration" / "Integration.csproj")
    solution_tree.active_document_project = str(tmp_path / "Tests" / "Tests.csproj")
    solution_tree.startup_projects = ["App"]
    assert find_active_project(solution_tree).name == "Integration"


def test_active_project_uses_active_document_next(solution_tree, tmp_path):
    solution_tree.active_document_project = str(tmp_path / "Tests" / "Tests.csproj")
    solution_tree.startup_projects = ["App"]
    assert find_active_project(solution_tree).name == "Tests"


def test_active_project_uses_startup_project_by_name(solution_tree):
    solution_tree.startup_projects = ["Integration"]
    assert find_active_project(solution_tree).name == "Integration"


def test_active_project_scans_for_buildable_kind(tmp_path):
    web = make_project(tmp_path, "Web", kind=WEBSITE_KIND)
    lib = make_project(tmp_path, "Lib")
    snapshot = SolutionSnapshot(is_open=True, projects=[web, make_folder("src", lib)])
    assert find_active_project(snapshot).name == "Lib"


def test_active_project_falls_back_to_first_node(tmp_path):
    web = make_project(tmp_path, "Web", kind=WEBSITE_KIND)
    folder = make_folder("empty")
    snapshot = SolutionSnapshot(is_open=True, projects=[folder, web])
    assert find_active_project(snapshot) is folder


def test_failing_step_falls_through(solution_tree):
    solution_tree.selected_project = 123  # not a string; the selection step blows up
    solution_tree.startup_projects = ["Tests"]
    assert find_active_project(solution_tree).name == "Tests"


def test_no_project_at_all():
    assert find_active_project(SolutionSnapshot(is_open=True)) is None


def test_resolve_project_with_directory_never_guesses(solution_tree):
    assert resolve_project(solution_tree, "/no/such/dir") is None
    assert resolve_project(solution_tree, None).name == "App"
    assert resolve_project(solution_tree, "   ").name == "App"
