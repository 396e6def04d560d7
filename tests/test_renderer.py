import pytest

from relaybot.domain.models.output import CodeUnit, FinalizationUnit, ProseUnit
from relaybot.domain.models.stream import StreamSnapshot, Usage
from relaybot.domain.services.renderer import IncrementalRenderer, RenderConfig

from conftest import FakeClock


SCENARIO = "Here:\n```js\nconsole.log(1)\n```\nDone."


def _committed(units):
    """Everything except live draft prose."""
    return [u for u in units if not (isinstance(u, ProseUnit) and not u.sealed)]


def _feed(renderer, clock, contents, reasoning="", advance=2.1, usage=None):
    units = []
    for content in contents:
        clock.advance(advance)
        units.extend(renderer.step(StreamSnapshot(content=content, reasoning=reasoning)))
    units.extend(renderer.step(StreamSnapshot(content=contents[-1], reasoning=reasoning, usage=usage, final=True)))
    return units


def test_three_delta_scenario_emits_prose_code_prose_finalization():
    clock = FakeClock()
    renderer = IncrementalRenderer(clock=clock)
    deltas = ["Here:\n```js\n", "console.log(1)\n```\n", "Done."]
    cumulative = [''.join(deltas[:i + 1]) for i in range(len(deltas))]

    units = _committed(_feed(renderer, clock, cumulative))

    assert [type(u) for u in units] == [ProseUnit, CodeUnit, ProseUnit, FinalizationUnit]
    assert units[0].text == "Here:\n"
    assert units[1].language == "js"
    assert units[1].code == "console.log(1)\n"
    assert units[1].inline is True
    assert units[2].text == "Done."
    assert renderer.processed_index == len(SCENARIO)


def test_scenario_in_single_final_burst_yields_same_units():
    renderer = IncrementalRenderer(clock=FakeClock())
    units = renderer.step(StreamSnapshot(content=SCENARIO, final=True))

    assert [type(u) for u in units] == [ProseUnit, CodeUnit, ProseUnit, FinalizationUnit]
    assert all(u.sealed for u in units if isinstance(u, ProseUnit))
    prose_and_syntax = units[0].text + units[1].source + units[1].separator + units[2].text
    assert prose_and_syntax == SCENARIO


def test_long_prose_is_split_into_4096_and_904():
    clock = FakeClock()
    renderer = IncrementalRenderer(clock=clock)
    text = "a" * 5000

    units = _committed(_feed(renderer, clock, [text[:2500], text]))

    prose = [u for u in units if isinstance(u, ProseUnit)]
    assert [len(u.text) for u in prose] == [4096, 904]
    assert renderer.state.cycles >= 2


def test_throttle_skips_cycles_inside_window():
    clock = FakeClock()
    renderer = IncrementalRenderer(clock=clock)

    clock.advance(1.0)
    assert renderer.step(StreamSnapshot(content="hello")) == []
    clock.advance(1.5)
    units = renderer.step(StreamSnapshot(content="hello world"))
    assert units == [ProseUnit(text="hello world", sealed=False)]
    clock.advance(0.5)
    assert renderer.step(StreamSnapshot(content="hello world!")) == []


def test_final_cycle_is_never_throttled():
    renderer = IncrementalRenderer(clock=FakeClock())
    units = renderer.step(StreamSnapshot(content="hi", final=True))
    assert units == [ProseUnit(text="hi"), FinalizationUnit()]


def test_one_fence_per_non_final_cycle():
    clock = FakeClock()
    renderer = IncrementalRenderer(clock=clock)
    content = "```py\na\n```\n```py\nb\n```\n```py\nc\n```\n"

    per_cycle = []
    for _ in range(4):
        clock.advance(2.5)
        units = renderer.step(StreamSnapshot(content=content))
        per_cycle.append([u for u in units if isinstance(u, CodeUnit)])

    assert [len(codes) for codes in per_cycle] == [1, 1, 1, 0]
    assert [codes[0].code for codes in per_cycle[:3]] == ["a\n", "b\n", "c\n"]
    assert renderer.processed_index == len(content)


def test_partial_fence_is_held_back_until_closed():
    clock = FakeClock()
    renderer = IncrementalRenderer(clock=clock)

    clock.advance(2.1)
    units = renderer.step(StreamSnapshot(content="Look ```py\nprint("))
    assert units == [ProseUnit(text="Look ", sealed=False)]
    assert renderer.processed_index == 0


def test_trailing_backticks_are_not_sealed_across_chunk_boundary():
    clock = FakeClock()
    renderer = IncrementalRenderer(clock=clock)
    head = "a" * 4095

    units = _committed(_feed(renderer, clock, [
        head + "``",
        head + "```py\nprint(1)\n```\nDone.",
    ]))

    prose = [u for u in units if isinstance(u, ProseUnit)]
    codes = [u for u in units if isinstance(u, CodeUnit)]
    assert [p.text for p in prose] == [head, "Done."]
    assert not any(p.text.endswith("`") for p in prose)
    assert len(codes) == 1
    assert codes[0].language == "py"
    assert codes[0].code == "print(1)\n"


def test_draft_holds_back_trailing_backticks():
    clock = FakeClock()
    renderer = IncrementalRenderer(clock=clock)

    clock.advance(2.1)
    assert renderer.step(StreamSnapshot(content="Run `")) == [ProseUnit(text="Run ", sealed=False)]
    assert renderer.processed_index == 0


def test_final_flushes_unterminated_fence_as_prose():
    renderer = IncrementalRenderer(clock=FakeClock())
    content = "Look ```py\nprint("
    units = renderer.step(StreamSnapshot(content=content, final=True))
    assert units[0] == ProseUnit(text=content)
    assert isinstance(units[-1], FinalizationUnit)


def test_large_code_block_is_not_inline():
    renderer = IncrementalRenderer(clock=FakeClock())
    body = "x = 1\n" * 400
    units = renderer.step(StreamSnapshot(content=f"```python\n{body}```", final=True))
    code = units[0]
    assert isinstance(code, CodeUnit)
    assert code.inline is False
    assert code.filename == "snippet.py"


@pytest.mark.parametrize("language,expected", [
    ("Python", "py"),
    ("", "txt"),
    ("zig", "zig"),
    ("..", "txt"),
    ("../../etc", "etc"),
    ("my.lang", "mylang"),
    ("f#", "f#"),
])
def test_attachment_extension_is_filename_safe(language, expected):
    code = CodeUnit(language=language, code="x", source="```x```")
    assert code.filename == f"snippet.{expected}"


def test_reasoning_preview_only_during_reasoning_phase():
    clock = FakeClock()
    renderer = IncrementalRenderer(reasoning_enabled=True, clock=clock)

    clock.advance(2.1)
    units = renderer.step(StreamSnapshot(content="", reasoning="pondering"))
    assert units == [ProseUnit(text="", sealed=False, reasoning_preview="pondering")]

    clock.advance(2.1)
    units = renderer.step(StreamSnapshot(content="Answer", reasoning="pondering more"))
    assert units == [ProseUnit(text="Answer", sealed=False)]
    assert renderer.state.is_reasoning_phase is False


def test_whitespace_content_keeps_reasoning_phase():
    clock = FakeClock()
    renderer = IncrementalRenderer(reasoning_enabled=True, clock=clock)
    clock.advance(2.1)
    renderer.step(StreamSnapshot(content="\n\n", reasoning="r"))
    assert renderer.state.is_reasoning_phase is True


def test_reasoning_preview_keeps_last_window():
    clock = FakeClock()
    renderer = IncrementalRenderer(reasoning_enabled=True, config=RenderConfig(reasoning_preview_chars=10), clock=clock)
    clock.advance(2.1)
    units = renderer.step(StreamSnapshot(content="", reasoning="0123456789abcdef"))
    assert units[0].reasoning_preview == "... 6789abcdef"


def test_no_preview_when_reasoning_disabled():
    clock = FakeClock()
    renderer = IncrementalRenderer(reasoning_enabled=False, clock=clock)
    clock.advance(2.1)
    assert renderer.step(StreamSnapshot(content="", reasoning="hidden")) == []


def test_finalization_carries_usage_and_reasoning_flag():
    renderer = IncrementalRenderer(reasoning_enabled=True, clock=FakeClock())
    usage = Usage(total_tokens=42, reasoning_tokens=7)
    units = renderer.step(StreamSnapshot(content="ok", reasoning="why", usage=usage, final=True))
    assert units[-1] == FinalizationUnit(usage=usage, reasoning_available=True)


def test_steps_after_final_are_ignored():
    renderer = IncrementalRenderer(clock=FakeClock())
    renderer.step(StreamSnapshot(content="done", final=True))
    assert renderer.step(StreamSnapshot(content="done more", final=True)) == []


@pytest.mark.parametrize("content", [
    SCENARIO,
    "plain text only",
    "```\nno lang\n```",
    "a" * 9000 + "\n```c\nint x;\n```\n" + "b" * 100,
    "x```rust\nfn main() {}\n```y```py\npass\n```",
])
def test_committed_lengths_equal_processed_index(content):
    clock = FakeClock()
    renderer = IncrementalRenderer(clock=clock)
    units = []
    for end in range(0, len(content) + 1, max(1, len(content) // 5)):
        clock.advance(2.1)
        units.extend(renderer.step(StreamSnapshot(content=content[:end])))
    units.extend(renderer.step(StreamSnapshot(content=content, final=True)))

    committed = 0
    rebuilt = ""
    for unit in units:
        if isinstance(unit, ProseUnit) and unit.sealed:
            committed += len(unit.text)
            rebuilt += unit.text
        elif isinstance(unit, CodeUnit):
            committed += unit.consumed
            rebuilt += unit.source + unit.separator
    assert committed == renderer.processed_index == len(content)
    assert rebuilt == content
