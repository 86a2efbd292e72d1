"""Unit tests for problem and contest page parsing."""

import pytest

from codeforces_client.domain.exceptions import HTTPStatusError, PageStructureError
from codeforces_client.infrastructure.parsers import ProblemPageParser, SelectorSet, StaticSelectorProvider
from codeforces_client.infrastructure.parsers.selectors import ProblemSelectors
from codeforces_client.services import create_page_parser

PROBLEM_PAGE = """
<html><body>
<div class="roundbox sidebox">
  <span class="tag-box">math</span>
  <span class="tag-box">  number theory </span>
  <span class="tag-box">math</span>
  <span class="tag-box" title="Difficulty">*1000</span>
</div>
<div class="problem-statement">
  <div class="header">
    <div class="title">A. Theatre Square</div>
    <div class="time-limit"><div class="property-title">time limit per test</div>1 second</div>
    <div class="memory-limit"><div class="property-title">memory limit per test</div>256 megabytes</div>
  </div>
  <div><p>Theatre Square in the capital city of Berland has a rectangular shape.</p>
  <p>What is the least number of flagstones needed?</p></div>
  <div class="input-specification"><div class="section-title">Input</div>
    <p>The input contains three positive integer numbers n, m and a.</p></div>
  <div class="output-specification"><div class="section-title">Output</div>
    <p>Write the needed number of flagstones.</p></div>
  <div class="sample-tests">
    <div class="section-title">Examples</div>
    <div class="sample-test">
      <div class="input"><div class="title">Input</div><pre>6 6 4<br/></pre></div>
      <div class="output"><div class="title">Output</div><pre>4<br/></pre></div>
      <div class="input"><div class="title">Input</div><pre>1 1 1</pre></div>
      <div class="output"><div class="title">Output</div><pre>1</pre></div>
    </div>
  </div>
  <div class="note"><div class="section-title">Note</div><p>Squares may overlap the edge.</p></div>
</div>
</body></html>
"""

FLAT_SAMPLES_PAGE = """
<div class="problem-statement">
  <div class="sample-tests">
    <div class="input"><pre><div class="test-example-line">2</div><div class="test-example-line">1 2</div></pre></div>
    <div class="output"><pre>3</pre></div>
  </div>
</div>
"""

CONTEST_PAGE = """
<table class="problems">
  <tr><th>#</th><th>Name</th></tr>
  <tr>
    <td class="id"><a href="/contest/1/problem/A">A</a></td>
    <td><div><a href="/contest/1/problem/A">Theatre Square</a></div></td>
  </tr>
  <tr>
    <td class="id"><a href="https://codeforces.com/contest/1/problem/B1">B1</a></td>
    <td><div><a href="/contest/1/problem/B1">Spreadsheets  (easy)</a></div></td>
  </tr>
  <tr><td colspan="2">Announcement</td></tr>
</table>
"""


@pytest.fixture
def parser(session):
    return ProblemPageParser(session)


def test_parse_problem_html_fields(parser):
    problem = parser.parse_problem_html(PROBLEM_PAGE, 1, "A", "https://codeforces.com/contest/1/problem/A")

    assert problem.problem_id == "1A"
    assert problem.name == "Theatre Square"
    assert problem.time_limit == "1 second"
    assert problem.memory_limit == "256 megabytes"
    assert problem.statement.startswith("Theatre Square in the capital city")
    assert problem.statement.endswith("flagstones needed?")
    assert problem.input_spec == "The input contains three positive integer numbers n, m and a."
    assert problem.output_spec == "Write the needed number of flagstones."
    assert problem.note == "Squares may overlap the edge."
    assert problem.tags == ("math", "number theory")
    assert problem.rating == 1000


def test_samples_are_paired_in_order(parser):
    problem = parser.parse_problem_html(PROBLEM_PAGE, 1, "A", "u")

    assert [(s.index, s.input, s.output) for s in problem.samples] == [
        (1, "6 6 4", "4"),
        (2, "1 1 1", "1"),
    ]


def test_flat_samples_with_line_divs(parser):
    problem = parser.parse_problem_html(FLAT_SAMPLES_PAGE, 5, "C", "u")

    assert len(problem.samples) == 1
    assert problem.samples[0].input == "2\n1 2"
    assert problem.samples[0].output == "3"


def test_missing_fields_are_left_empty(parser):
    problem = parser.parse_problem_html("<html><body></body></html>", 7, "B", "u")

    assert problem.name == ""
    assert problem.time_limit == ""
    assert problem.samples == ()
    assert problem.tags == ()
    assert problem.rating is None


@pytest.mark.asyncio
async def test_parse_problem_fetches_contest_url(parser, fake_http, respond):
    fake_http.push(respond(PROBLEM_PAGE))

    problem = await parser.parse_problem(1, "A")

    assert fake_http.calls[0].url == "https://codeforces.com/contest/1/problem/A"
    assert problem.url == "https://codeforces.com/contest/1/problem/A"
    assert problem.name == "Theatre Square"


@pytest.mark.asyncio
async def test_parse_problemset_and_gym_urls(parser, fake_http, respond):
    fake_http.push(respond(PROBLEM_PAGE), respond(PROBLEM_PAGE))

    await parser.parse_problemset(1, "A")
    await parser.parse_gym_problem(100001, "A")

    assert [call.url for call in fake_http.calls] == [
        "https://codeforces.com/problemset/problem/1/A",
        "https://codeforces.com/gym/100001/problem/A",
    ]


@pytest.mark.asyncio
async def test_non_2xx_page_raises(parser, fake_http, respond):
    fake_http.push(respond("Not Found", status_code=404))

    with pytest.raises(HTTPStatusError) as exc_info:
        await parser.parse_problem(99999, "Z")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_parse_contest_problems(parser, fake_http, respond):
    fake_http.push(respond(CONTEST_PAGE))

    problems = await parser.parse_contest_problems(1)

    assert fake_http.calls[0].url == "https://codeforces.com/contest/1"
    assert [(p.index, p.name, p.url) for p in problems] == [
        ("A", "Theatre Square", "https://codeforces.com/contest/1/problem/A"),
        ("B1", "Spreadsheets (easy)", "https://codeforces.com/contest/1/problem/B1"),
    ]


@pytest.mark.asyncio
async def test_parse_empty_contest_table(parser, fake_http, respond):
    fake_http.push(respond('<html><table class="problems"></table></html>'))

    assert await parser.parse_contest_problems(100001, gym=True) == []
    assert fake_http.calls[0].url == "https://codeforces.com/gym/100001"


@pytest.mark.asyncio
async def test_verify_page_structure_passes(parser, fake_http, respond):
    fake_http.push(respond(PROBLEM_PAGE))

    await parser.verify_page_structure()

    assert fake_http.calls[0].url == "https://codeforces.com/problemset/problem/1/A"


@pytest.mark.asyncio
async def test_verify_page_structure_lists_missing_groups(parser, fake_http, respond):
    fake_http.push(respond('<div class="problem-statement"><div class="header"><div class="title">A. X</div></div></div>'))

    with pytest.raises(PageStructureError) as exc_info:
        await parser.verify_page_structure()

    error = exc_info.value
    assert error.missing == ["time_limit", "memory_limit", "statement", "samples"]
    assert error.selector_version == "2024.12"
    assert "2024.12" in str(error)


def test_flat_samples_with_unequal_counts(parser):
    html = """
    <div class="problem-statement"><div class="sample-tests">
      <div class="input"><pre>1</pre></div><div class="output"><pre>one</pre></div>
      <div class="input"><pre>2</pre></div>
    </div></div>
    """

    problem = parser.parse_problem_html(html, 5, "C", "u")

    assert [(s.input, s.output) for s in problem.samples] == [("1", "one")]


def test_alternate_selector_table(session):
    legacy = SelectorSet(
        version="legacy",
        updated="2020-01-01",
        problem=ProblemSelectors(title=".problem-title"),
    )
    parser = create_page_parser(session, StaticSelectorProvider(legacy))

    problem = parser.parse_problem_html('<h1 class="problem-title">B. Old Layout</h1>', 1, "B", "u")

    assert problem.name == "Old Layout"
    assert parser.selectors.version == "legacy"


def test_flat_samples_beside_empty_pair_blocks(parser):
    html = """
    <div class="problem-statement"><div class="sample-tests">
      <div class="sample-test"></div>
      <div class="input"><pre>4</pre></div><div class="output"><pre>YES</pre></div>
    </div></div>
    """

    problem = parser.parse_problem_html(html, 4, "A", "u")

    assert [(s.index, s.input, s.output) for s in problem.samples] == [(1, "4", "YES")]
