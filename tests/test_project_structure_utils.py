"""Tests for file-map tree building and rendering."""

from projectmap.project_structure_utils import (
    build_tree, generate_file_map, generate_file_map_multi_root, render_tree
)

ROOT = "/Users/test/project"


def test_render_puts_directories_first_and_marks_all_when_no_selection():
    tree = build_tree(["/p/src/index.ts", "/p/src/utils.ts", "/p/package.json"], "/p")

    assert render_tree(tree) == [
        "├── src",
        "│   ├── index.ts *",
        "│   └── utils.ts *",
        "└── package.json *",
    ]


def test_build_tree_keeps_insertion_order_and_kinds():
    tree = build_tree(["/p/b.txt", "/p/a/x.txt"], "/p")

    assert list(tree.children) == ["b.txt", "a"]
    assert tree.children["a"].is_directory
    assert not tree.children["b.txt"].is_directory
    assert not tree.children["a"].is_selected


def test_reinserting_leaf_only_turns_selection_on():
    tree = build_tree(["/p/a.txt", "/p/a.txt"], "/p", selected_files={"/p/a.txt"})
    assert tree.children["a.txt"].is_selected

    tree = build_tree(["/p/a.txt"], "/p", selected_files=set())
    assert not tree.children["a.txt"].is_selected


def test_generate_file_map_single_root_contract():
    files = [f"{ROOT}/src/index.ts", f"{ROOT}/src/utils.ts", f"{ROOT}/package.json"]

    result = generate_file_map(files, ROOT)

    assert result == (
        "<file_map>\n"
        "/Users/test/project\n"
        "├── src\n"
        "│   ├── index.ts *\n"
        "│   └── utils.ts *\n"
        "└── package.json *\n"
        "\n"
        "(* denotes selected files)\n"
        "</file_map>"
    )


def test_empty_inputs_render_nothing():
    assert generate_file_map([], ROOT) == ""
    assert generate_file_map_multi_root({}) == ""
    assert generate_file_map_multi_root({"/w1": [], "/w2": []}) == ""


def test_nested_directories_use_vertical_and_blank_indents():
    files = [f"{ROOT}/src/commands/copy.ts", f"{ROOT}/src/utils.ts", f"{ROOT}/z.md"]

    lines = generate_file_map(files, ROOT).splitlines()

    assert lines[2:6] == [
        "├── src",
        "│   ├── commands",
        "│   │   └── copy.ts *",
        "│   └── utils.ts *",
    ]
    assert lines[6] == "└── z.md *"


def test_only_selected_files_marked():
    files = [f"{ROOT}/src/index.ts", f"{ROOT}/src/utils.ts", f"{ROOT}/package.json"]

    result = generate_file_map(files, ROOT, [f"{ROOT}/src/index.ts"])

    assert "index.ts *" in result
    assert "utils.ts" in result and "utils.ts *" not in result
    assert "package.json" in result and "package.json *" not in result


def test_selected_ignored_file_merged_into_map():
    project = [f"{ROOT}/src/index.ts", f"{ROOT}/src/utils.ts"]
    ignored = f"{ROOT}/dist/bundle.js"
    merged = sorted(set(project + [ignored]))

    result = generate_file_map(merged, ROOT, [f"{ROOT}/src/index.ts", ignored])

    assert "dist" in result
    assert "bundle.js *" in result
    assert "index.ts *" in result
    assert "utils.ts *" not in result


def test_sorting_within_kind_is_alphabetical():
    lines = render_tree(build_tree(["/p/b.py", "/p/A.py", "/p/zeta/x", "/p/alpha/y"], "/p"))

    assert [line[4:].rstrip(" *") for line in lines if not line.startswith(("│", " "))] == [
        "alpha", "zeta", "A.py", "b.py",
    ]


def test_multi_root_blocks_separated_without_legend():
    result = generate_file_map_multi_root(
        {"/workspace1": ["/workspace1/index.ts"], "/workspace2": ["/workspace2/main.ts"]}
    )

    assert result == (
        "<file_map>\n"
        "/workspace1\n"
        "└── index.ts *\n"
        "\n"
        "/workspace2\n"
        "└── main.ts *\n"
        "</file_map>"
    )


def test_multi_root_skips_empty_roots_and_marks_selection():
    result = generate_file_map_multi_root(
        {"/workspace1": ["/workspace1/a.ts", "/workspace1/b.ts"], "/workspace2": []},
        ["/workspace1/a.ts"],
    )

    assert "/workspace2" not in result
    assert "a.ts *" in result
    assert "b.ts" in result and "b.ts *" not in result
    assert "(* denotes selected files)" not in result


def test_mixed_case_names_sort_case_insensitively_with_exact_tiebreak():
    lines = render_tree(build_tree(["/p/b.py", "/p/B.py", "/p/a.py", "/p/A.py", "/p/Zed/x", "/p/apps/y"], "/p"))

    top = [line[4:].rstrip(" *") for line in lines if not line.startswith(("│", " "))]
    assert top == ["apps", "Zed", "A.py", "a.py", "B.py", "b.py"]
