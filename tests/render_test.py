"""Aggregation and SVG rendering tests (no network)."""
import pathlib
import sys

import pytest
from lxml import etree

repo_root = pathlib.Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

import generate_stats
from generate_stats import Summary

SVG_NS = "{http://www.w3.org/2000/svg}"

REPOS = [
    {"private": True, "stargazers_count": 10, "forks_count": 2},
    {"private": False, "stargazers_count": 5},
    {"forks_count": 7},
    {"private": True, "stargazers_count": None, "forks_count": None},
    {"private": False, "stargazers_count": 42, "forks_count": 0},
]


def test_aggregate_counts_and_sums():
    s = generate_stats.aggregate("octo", REPOS, 4)
    assert s == Summary(account_name="octo", total_repos=5, private_count=2,
                        star_sum=57, fork_sum=9, follower_count=4)


def test_aggregate_empty():
    s = generate_stats.aggregate("octo", [], 0)
    assert (s.total_repos, s.private_count, s.star_sum, s.fork_sum) == (0, 0, 0, 0)


@pytest.mark.parametrize("n", [1, 7, 100, 250])
def test_aggregate_invariants(n):
    repos = [{"private": i % 3 == 0, "stargazers_count": i, "forks_count": i % 5} for i in range(n)]
    s = generate_stats.aggregate("octo", repos, 1)
    assert s.total_repos == n
    assert 0 <= s.private_count <= s.total_repos
    assert s.star_sum == sum(range(n))
    assert s.fork_sum == sum(i % 5 for i in range(n))


SAMPLE = Summary(account_name="alice", total_repos=12, private_count=3,
                 star_sum=57, fork_sum=9, follower_count=4)


def value_at(root, translate, x):
    group = root.find(f".//{SVG_NS}g[@transform='{translate}']")
    assert group is not None, f"Missing group {translate}"
    for text in group.findall(f"{SVG_NS}text"):
        if text.get("x") == x:
            return text.text
    raise AssertionError(f"No text at x={x} in {translate}")


def test_render_layout():
    svg = generate_stats.render_svg(SAMPLE)
    assert svg.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    root = etree.fromstring(svg.encode("utf-8"))
    assert root.tag == f"{SVG_NS}svg"
    assert root.get("width") == "460"
    assert root.get("height") == "140"

    title = root.find(f".//{SVG_NS}text[@class='title']")
    assert title.text == "alice · GitHub Stats"
    assert value_at(root, "translate(0,28)", "180") == "12"
    assert value_at(root, "translate(0,28)", "260") == "private: 3"
    assert value_at(root, "translate(0,62)", "180") == "57"
    assert value_at(root, "translate(0,62)", "330") == "9"
    assert value_at(root, "translate(0,96)", "180") == "4"


def test_render_is_deterministic():
    assert generate_stats.render_svg(SAMPLE) == generate_stats.render_svg(SAMPLE)


def test_render_escapes_account_name():
    s = Summary(account_name="a<b>&c", total_repos=0, private_count=0,
                star_sum=0, fork_sum=0, follower_count=0)
    svg = generate_stats.render_svg(s)
    root = etree.fromstring(svg.encode("utf-8"))
    assert root.find(f".//{SVG_NS}text[@class='title']").text == "a<b>&c · GitHub Stats"


def test_write_svg_overwrites(tmp_path):
    out = tmp_path / "stats.svg"
    out.write_text("old content", encoding="utf-8")
    svg = generate_stats.render_svg(SAMPLE)
    generate_stats.write_svg(svg, str(out))
    assert out.read_text(encoding="utf-8") == svg


def test_write_svg_does_not_create_directories(tmp_path):
    with pytest.raises(OSError):
        generate_stats.write_svg(generate_stats.render_svg(SAMPLE), str(tmp_path / "missing" / "stats.svg"))
    assert not (tmp_path / "missing").exists()
