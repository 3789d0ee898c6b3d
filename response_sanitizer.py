"""Deterministic repair of malformed JSON returned by LLMs.

`sanitize()` runs a fixed sequence of passes. Every pass is a pure, total
`str -> str` function that targets one observed class of model mistakes
(doubled braces, missing commas, bare keys, inline unit suffixes, comments,
URLs, notes, truncation). Later passes assume the normalization done by the
earlier ones:

1. strip_noise               - fences, comments, URLs, notes, ellipses, control chars
2. extract_structured_span   - largest top-level {...} / [...] span
3. repair_category_structure - meal-plan and truncated day-plan repairs
4. repair_punctuation        - braces, bare keys, units, commas
5. balance_delimiters        - append missing closers (never openers)
6. repair_macro_targets      - close every element of "macroTargets"

Apart from the fence, URL, note and ellipsis stripping of pass 1, rewrites only
touch text outside JSON string literals.
"""

from __future__ import annotations

import json
import re
from typing import Callable, Iterator, List, Tuple

from observability import setup_structured_logger
from payload_access import empty_meal_payload
from validation_config import MEAL_SLOTS

logger = setup_structured_logger("fitplan.sanitizer")

_CLOSERS = {"{": "}", "[": "]"}

# ============================================================================
# String-literal aware scanning
# ============================================================================


def _split_segments(text: str) -> List[Tuple[bool, str]]:
    """Split text into (is_string, chunk) runs; string chunks keep their quotes.

    An unterminated string at the end of the text is returned as a string chunk.
    """
    segments: List[Tuple[bool, str]] = []
    buf: List[str] = []
    in_string = False
    escape = False

    for ch in text:
        if in_string:
            buf.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                segments.append((True, "".join(buf)))
                buf = []
                in_string = False
        elif ch == '"':
            if buf:
                segments.append((False, "".join(buf)))
            buf = [ch]
            in_string = True
        else:
            buf.append(ch)

    if buf:
        segments.append((in_string, "".join(buf)))
    return segments


def _map_code(text: str, rewrite: Callable[[str], str]) -> str:
    """Apply `rewrite` to every chunk outside string literals."""
    return "".join(
        chunk if is_string else rewrite(chunk)
        for is_string, chunk in _split_segments(text)
    )


def _structural_chars(text: str, start: int = 0) -> Iterator[Tuple[int, str]]:
    """Yield (index, char) for characters outside string literals.

    Quote characters themselves are not yielded. `start` must not point inside
    a string literal.
    """
    in_string = False
    escape = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
            continue
        yield index, ch


def _is_structural(text: str, index: int) -> bool:
    """Whether text[index] lies outside every string literal."""
    return any(pos == index for pos, _ in _structural_chars(text[: index + 1]))


def _matching_close(text: str, open_index: int) -> int:
    """Index of the delimiter closing text[open_index], or -1 if it never closes.

    Only delimiters of the same kind are counted, so an array whose elements
    lost their closing braces still finds its closing bracket.
    """
    opener = text[open_index]
    closer = _CLOSERS[opener]
    depth = 0
    for index, ch in _structural_chars(text, open_index):
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return index
    return -1


def _open_delimiters(text: str) -> Tuple[List[str], bool, bool]:
    """Unclosed openers (outermost first), unterminated-string flag, pending escape."""
    stack: List[str] = []
    in_string = False
    escape = False
    for ch in text:
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append(ch)
        elif ch in "}]":
            # Mismatched closers are left for the parser to reject
            if stack and _CLOSERS[stack[-1]] == ch:
                stack.pop()
    return stack, in_string, escape


def is_truncated(text: str) -> bool:
    """True when an object, array or string is still open at the end of text."""
    stack, in_string, _ = _open_delimiters(text)
    return bool(stack) or in_string


# ============================================================================
# Pass 1: noise
# ============================================================================

_THOUGHT_BLOCK = re.compile(r"<thought>.*?</thought>", re.DOTALL | re.IGNORECASE)
_CODE_FENCE = re.compile(r"```(?:json|JSON)?")
_URL = re.compile(r"https?://[^\s\"'<>()\[\]{},]+")
_NOTE_SECTION = re.compile(r"^[ \t]*(?:\*\*)?Note:", re.MULTILINE)
_ELLIPSIS = re.compile(r"\.\.\.|…")
_WHITESPACE = re.compile(r"\s+")


def _strip_note_section(text: str) -> str:
    first_open = min((i for i in (text.find("{"), text.find("[")) if i != -1), default=-1)
    if first_open == -1:
        return text
    for match in _NOTE_SECTION.finditer(text):
        if match.start() > first_open:
            return text[: match.start()]
    return text


def _strip_comments(text: str) -> str:
    """Drop // and /* */ comments found outside string literals.

    An unterminated block comment is kept as text.
    """
    out: List[str] = []
    in_string = False
    escape = False
    index = 0
    while index < len(text):
        ch = text[index]
        if in_string:
            out.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            index += 1
            continue
        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = len(text) if newline == -1 else newline
            continue
        if text.startswith("/*", index):
            close = text.find("*/", index + 2)
            if close != -1:
                index = close + 2
                continue
        if ch == '"':
            in_string = True
        out.append(ch)
        index += 1
    return "".join(out)


def strip_noise(text: str) -> str:
    """Remove everything that is never part of the JSON payload.

    Pre: raw completion text.
    Post: single-line text without fences, thought blocks, URLs, comments
    outside string literals, line-leading "Note:" sections after the payload
    starts, ellipses or non-printable characters; whitespace runs collapsed to one space.
    """
    text = _THOUGHT_BLOCK.sub("", text)
    text = _CODE_FENCE.sub("", text)
    # URLs go first so their "//" is not read as a comment
    text = _URL.sub("", text)
    text = _strip_comments(text)
    text = _strip_note_section(text)
    text = _ELLIPSIS.sub("", text)
    text = "".join(ch for ch in text if ch.isprintable() or ch in "\n\t")
    return _WHITESPACE.sub(" ", text).strip()


# ============================================================================
# Pass 2: payload extraction
# ============================================================================


def _candidate_span(text: str, opener: str) -> Tuple[int, int]:
    start = text.find(opener)
    if start == -1:
        return -1, -1
    end = text.rfind(_CLOSERS[opener])
    # No closer after the opener: truncated payload, keep the tail
    if end < start:
        end = len(text) - 1
    return start, end


def extract_structured_span(text: str) -> str:
    """Keep the largest top-level {...} or [...] span.

    Pre: output of strip_noise.
    Post: text starts with an opener and, unless truncated, ends with the last
    matching closer; prose before and after is discarded. Text without any
    opener is returned stripped.
    """
    spans = [
        span for span in (_candidate_span(text, "{"), _candidate_span(text, "["))
        if span[0] != -1
    ]
    if not spans:
        return text.strip()
    start, end = max(spans, key=lambda span: (span[1] - span[0], -span[0]))
    return text[start:end + 1].strip()


# ============================================================================
# Shared rewrites (passes 3 and 4)
# ============================================================================

_BARE_KEY = re.compile(r"(^|[{,])(\s*)([A-Za-z_][A-Za-z0-9_\-]*)(\s*):")
_UNIT_SUFFIX = re.compile(r"(:\s*-?\d+(?:\.\d+)?)\s*(?:kcal|cal|kg|mg|ml|g)\b", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_REPEATED_COMMA = re.compile(r",(\s*,)+")
_EMPTY_OBJECT = re.compile(r"\{\s*\}")

EMPTY_OBJECT_PLACEHOLDER = '{"empty": true}'


def collapse_doubled_braces(text: str) -> str:
    """Drop redundant openers such as `{{` / `[{{` and their matching closers.

    `{` directly followed by `{` is never valid JSON, so the outer brace is a
    phantom: it is removed together with the `}` that closes it. Legitimate
    `}}` sequences are kept.
    """
    segments = _split_segments(text)
    out: List[str] = []
    phantoms: List[bool] = []

    for index, (is_string, chunk) in enumerate(segments):
        if is_string:
            out.append(chunk)
            continue
        for pos, ch in enumerate(chunk):
            if ch == "{":
                rest = chunk[pos + 1:].lstrip()
                if rest:
                    next_char = rest[0]
                else:
                    next_char = '"' if index + 1 < len(segments) else ""
                phantom = next_char == "{"
                phantoms.append(phantom)
                if not phantom:
                    out.append(ch)
            elif ch == "}" and phantoms:
                if not phantoms.pop():
                    out.append(ch)
            else:
                out.append(ch)

    return "".join(out)


def quote_bare_keys(text: str) -> str:
    """`{calories: 450}` -> `{"calories": 450}`."""
    return _map_code(text, lambda chunk: _BARE_KEY.sub(r'\1\2"\3"\4:', chunk))


def strip_unit_suffixes(text: str) -> str:
    """`"protein": 30g` -> `"protein": 30`; quoted values are left alone."""
    return _map_code(text, lambda chunk: _UNIT_SUFFIX.sub(r"\1", chunk))


def _append_comma(out: List[str]) -> None:
    trailing: List[str] = []
    while out and out[-1].isspace():
        trailing.append(out.pop())
    out.append(",")
    out.append("".join(reversed(trailing)) or " ")


def _ends_value(ch: str) -> bool:
    return ch in '}]"' or ch.isalnum()


def insert_missing_commas(text: str) -> str:
    """Insert the comma between two adjacent values.

    A value end (`}`, `]`, closing quote, number or literal) followed by a
    value start (`{`, `[`, opening quote) is always a missing comma; valid JSON
    never contains that sequence.
    """
    out: List[str] = []
    last = ""

    for is_string, chunk in _split_segments(text):
        if is_string:
            if last and _ends_value(last):
                _append_comma(out)
            out.append(chunk)
            last = '"'
            continue
        for ch in chunk:
            if ch in "{[" and last and _ends_value(last):
                _append_comma(out)
            out.append(ch)
            if not ch.isspace():
                last = ch

    return "".join(out)


def remove_trailing_commas(text: str) -> str:
    """`[1, 2,]` -> `[1, 2]`; repeated commas collapse to one."""

    def rewrite(chunk: str) -> str:
        chunk = _REPEATED_COMMA.sub(",", chunk)
        return _TRAILING_COMMA.sub(r"\1", chunk)

    return _map_code(text, rewrite)


# ============================================================================
# Pass 3: category-specific structure
# ============================================================================

_SNACKS_ARRAY = re.compile(r'"snacks"\s*:\s*\[')
_MEAL_SLOT = re.compile(r'"(%s)"\s*:\s*\{' % "|".join(MEAL_SLOTS))


def close_snacks_arrays(text: str) -> str:
    """Append the closing braces a snack object lost before its array's `]`."""
    insertions: List[Tuple[int, str]] = []

    for match in _SNACKS_ARRAY.finditer(text):
        open_index = match.end() - 1
        if not _is_structural(text, open_index):
            continue
        brackets = 0
        braces = 0
        for index, ch in _structural_chars(text, open_index):
            if ch == "[":
                brackets += 1
            elif ch == "]":
                brackets -= 1
                if brackets == 0:
                    if braces > 0:
                        insertions.append((index, "}" * braces))
                    break
            elif ch == "{":
                braces += 1
            elif ch == "}":
                braces -= 1

    for index, closers in sorted(insertions, reverse=True):
        text = text[:index] + closers + text[index:]
    return text


def fill_empty_objects(text: str) -> str:
    """`{}` -> `{"empty": true}` so empty meal slots stay visible as keys."""
    return _map_code(text, lambda chunk: _EMPTY_OBJECT.sub(EMPTY_OBJECT_PLACEHOLDER, chunk))


def repair_meal_plan(text: str) -> str:
    """Structural repairs for weekly meal-plan payloads.

    Pre: extracted span containing "mealPlan".
    Post: no doubled braces, objects separated by commas, every snack object
    closed inside its array, no empty object literals.
    """
    text = collapse_doubled_braces(text)
    text = insert_missing_commas(text)
    text = close_snacks_arrays(text)
    return fill_empty_objects(text)


def reconstruct_truncated_day_plan(text: str) -> str:
    """Rebuild a minimal day plan from a response cut off mid-object.

    Pre: extracted span containing "dayPlan".
    Post: unchanged if the text is complete or has no complete meal; otherwise
    `{"dayPlan": {...}}` holding every complete meal (one carrying a "macros"
    record), empty-meal placeholders for the other slots and no snacks.
    """
    if not is_truncated(text):
        return text

    meals = {}
    for match in _MEAL_SLOT.finditer(text):
        slot = match.group(1)
        open_index = match.end() - 1
        if slot in meals or not _is_structural(text, open_index):
            continue
        close_index = _matching_close(text, open_index)
        if close_index == -1:
            continue
        body = text[open_index:close_index + 1]
        if '"macros"' in body:
            meals[slot] = body

    if not meals:
        return text

    logger.info(
        "Rebuilt truncated day plan",
        extra={"extra_fields": {"recovered_meals": sorted(meals)}},
    )
    empty_meal = json.dumps(empty_meal_payload())
    parts = [f'"{slot}": {meals.get(slot, empty_meal)}' for slot in MEAL_SLOTS]
    parts.append('"snacks": []')
    return '{"dayPlan": {' + ", ".join(parts) + "}}"


def repair_category_structure(text: str) -> str:
    """Dispatch to the meal-plan or day-plan repair based on the payload key."""
    if '"mealPlan"' in text:
        return repair_meal_plan(text)
    if '"dayPlan"' in text:
        return reconstruct_truncated_day_plan(text)
    return text


# ============================================================================
# Pass 4: punctuation
# ============================================================================


def repair_punctuation(text: str) -> str:
    """Generic punctuation repair.

    Pre: extracted span.
    Post: no redundant nested braces, every object key quoted, no unit
    suffix after a bare number, commas between adjacent values and none
    before a closing delimiter.
    """
    text = collapse_doubled_braces(text)
    text = quote_bare_keys(text)
    text = strip_unit_suffixes(text)
    text = insert_missing_commas(text)
    return remove_trailing_commas(text)


# ============================================================================
# Pass 5: delimiter balance
# ============================================================================


def balance_delimiters(text: str) -> str:
    """Append the closers (and closing quote) a truncated payload is missing.

    Pre: any text.
    Post: every opener outside strings is closed, in nesting order. Openers are
    never inserted; surplus closers are left for the parser to reject.
    """
    stack, in_string, escape = _open_delimiters(text)
    if in_string:
        if escape:
            text = text[:-1]
        text += '"'
    if stack:
        text = text.rstrip()
        if text.endswith(","):
            text = text[:-1]
        text += "".join(_CLOSERS[opener] for opener in reversed(stack))
    return text


# ============================================================================
# Pass 6: macroTargets elements
# ============================================================================

_MACRO_TARGETS_ARRAY = re.compile(r'"macroTargets"\s*:\s*\[')
_CLOSER_TAIL = re.compile(r"[\s}\]]*")


def _element_cuts(content: str) -> List[int]:
    """Offsets in array content where one element ends and the next begins.

    A cut is made at
    - a `,` right after an element's closing `}` (regular separator),
    - a `{` right after a closing `}` (missing comma),
    - the `,` before a `{` that appears where an object key is expected
      (the previous element lost its closing brace).
    Elements that lost their opening brace are not split internally, since
    their member commas never follow a `}` at depth 0.
    """
    cuts: List[int] = []
    depth = 0
    nested = 0
    last = ""
    last_comma = -1
    offset = 0

    for is_string, chunk in _split_segments(content):
        if is_string:
            last = '"'
            offset += len(chunk)
            continue
        for pos, ch in enumerate(chunk):
            index = offset + pos
            if ch == "{":
                if nested == 0 and depth >= 1 and last == ",":
                    cuts.append(last_comma)
                    depth = 0
                elif nested == 0 and depth == 0 and last == "}":
                    cuts.append(index)
                depth += 1
            elif ch == "}":
                depth = max(depth - 1, 0)
            elif ch == "[":
                nested += 1
            elif ch == "]":
                nested = max(nested - 1, 0)
            elif ch == "," and nested == 0:
                last_comma = index
                if depth == 0 and last == "}":
                    cuts.append(index)
            if not ch.isspace():
                last = ch
        offset += len(chunk)

    return cuts


def _split_elements(content: str) -> List[str]:
    bounds = [0] + _element_cuts(content) + [len(content)]
    return [content[start:end] for start, end in zip(bounds, bounds[1:])]


def repair_macro_targets(text: str) -> str:
    """Re-segment the "macroTargets" array so every element is a closed object.

    Pre: output of balance_delimiters.
    Post: elements of the first "macroTargets" array start with `{`, are
    individually balanced and are joined by ", ". When only closers follow
    the array they are recomputed for the rebuilt prefix.
    """
    match = _MACRO_TARGETS_ARRAY.search(text)
    if not match:
        return text
    open_index = match.end() - 1
    if not _is_structural(text, open_index):
        return text
    close_index = _matching_close(text, open_index)
    if close_index == -1:
        return text

    content = text[open_index + 1:close_index]
    if "{" not in content:
        return text

    elements = []
    for chunk in _split_elements(content):
        chunk = chunk.strip().strip(",").strip()
        if not chunk:
            continue
        if not chunk.startswith("{"):
            chunk = "{" + chunk
        elements.append(balance_delimiters(chunk))

    rebuilt = text[:open_index] + "[" + ", ".join(elements) + "]"
    tail = text[close_index + 1:]
    # A tail of bare closers was produced by balancing the unsplit array; recompute it
    if _CLOSER_TAIL.fullmatch(tail):
        return balance_delimiters(rebuilt)
    return rebuilt + tail


# ============================================================================
# Pipeline
# ============================================================================

SANITIZER_PASSES: Tuple[Callable[[str], str], ...] = (
    strip_noise,
    extract_structured_span,
    repair_category_structure,
    repair_punctuation,
    balance_delimiters,
    repair_macro_targets,
)


def sanitize(raw: str) -> str:
    """Run every sanitizer pass over a raw completion.

    Never raises: a pass that fails is logged and skipped, and unparseable
    output is left for the parse step to reject.
    """
    text = raw if isinstance(raw, str) else ""
    for sanitizer_pass in SANITIZER_PASSES:
        try:
            text = sanitizer_pass(text)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                f"Sanitizer pass {sanitizer_pass.__name__} failed: {exc}",
                extra={"extra_fields": {"pass": sanitizer_pass.__name__}},
                exc_info=True,
            )
    return text
