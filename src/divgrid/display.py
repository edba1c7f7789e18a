# src/divgrid/display.py
from __future__ import annotations

from colorama import Fore, Style
from sympy import factorint

from divgrid.fmt import abbr_int, format_factorization, format_int_list
from divgrid.grid import Highlight, Viewport, generate_blocks, mark_block
from divgrid.ntheory import divisors, integer_sqrt, is_likely_prime, is_power_of_two, is_prime
from divgrid.registry import Index
from divgrid.sequences import StepResult, StepStatus

# one glyph per integer column
_GLYPHS = {
    Highlight.PLAIN: "o",
    Highlight.KEY: "#",
    Highlight.LIKELY_PRIME: "p",
    Highlight.POWER_OF_TWO: "^",
}
_COLOURS = {
    Highlight.PLAIN: "",
    Highlight.KEY: Fore.BLUE + Style.BRIGHT,
    Highlight.LIKELY_PRIME: Fore.YELLOW,
    Highlight.POWER_OF_TWO: Fore.RED,
}
_EMPTY = " "

# trial division and divisor enumeration are O(sqrt n)
_TRIAL_BITS = 64

_STATUS_COLOURS = {
    StepStatus.FINISHED: Fore.GREEN,
    StepStatus.LOADING: Fore.CYAN,
    StepStatus.INVALID: Fore.RED,
    StepStatus.UNAVAILABLE: Fore.RED,
    StepStatus.NO_SEQUENCE: Fore.YELLOW,
    StepStatus.RESET: Fore.YELLOW,
}


def _c(text: str, colour: str, use_colour: bool) -> str:
    if not use_colour or not colour:
        return text
    return f"{colour}{text}{Style.RESET_ALL}"


def render_grid(key: int, level: int, *, rows: int, columns: int, leg: int = 0,
                block_size: int = 1, colour: bool = True) -> list[str]:
    """
    Text rendering of the divisor grid, one line per row d = level .. level+rows-1.

    The key column sits in the middle; each printed cell is a non-midpoint
    block, block_size characters apart. Returns the header lines followed by the grid lines.
    """
    vp = Viewport(width=columns, height=rows * block_size, block_size=block_size, center_x=columns // 2)
    cells: dict[int, list[str]] = {}
    labelled: dict[Highlight, list[int]] = {Highlight.LIKELY_PRIME: [], Highlight.POWER_OF_TWO: []}

    for block in generate_blocks(key, level, vp, max_rows=rows):
        if block.midpoint:
            continue
        col = int(block.x)
        if not 0 <= col < columns:
            continue
        mark = mark_block(block, key, leg)
        line = cells.setdefault(block.d, [_EMPTY] * columns)
        line[col] = _c(_GLYPHS[mark.highlight], _COLOURS[mark.highlight], colour)
        if mark.label is not None:
            labelled[mark.label].append(block.n)

    width = len(str(level + rows - 1))
    lines = [_c(f"key {abbr_int(key)}, level {level}", Fore.CYAN + Style.BRIGHT, colour)]
    if labelled[Highlight.LIKELY_PRIME]:
        lines.append("likely primes: " + format_int_list(sorted(labelled[Highlight.LIKELY_PRIME])))
    if labelled[Highlight.POWER_OF_TWO]:
        lines.append("powers of two: " + format_int_list(sorted(labelled[Highlight.POWER_OF_TWO])))
    for d in range(level, level + rows):
        body = "".join(cells.get(d, [_EMPTY] * columns)).rstrip()
        lines.append(f"{d:>{width}} |{body}")
    return lines


def print_grid(key: int, level: int, *, rows: int, columns: int, leg: int = 0, block_size: int = 1) -> None:
    for line in render_grid(key, level, rows=rows, columns=columns, leg=leg, block_size=block_size):
        print(line)


def format_step(result: StepResult, colour: bool = True) -> str:
    if result.status is StepStatus.VALUE:
        return f"i{result.iteration}  {abbr_int(result.value)}"
    text = result.status.value
    if result.message:
        text += f": {result.message}"
    return _c(text, _STATUS_COLOURS.get(result.status, ""), colour)


def print_variants(index: Index, offline: list[str] | None = None) -> None:
    print(f"{Fore.CYAN}{Style.BRIGHT}Sequence variants{Style.RESET_ALL}")
    for kind in index.variants:
        link = index.link(kind)
        tail = f"  {Fore.YELLOW}{link}{Style.RESET_ALL}" if link else ""
        print(f"  {kind.value:<13} {index.labels[kind]:<15} {index.descriptions[kind]}{tail}")
    if index.missing:
        print("  missing: " + ", ".join(k.value for k in index.missing))
    if offline:
        print(f"  offline OEIS ids: {', '.join(offline)}")


def _yes_no(flag: bool) -> str:
    return f"{Fore.GREEN}Yes{Style.RESET_ALL}" if flag else "No"


def print_info(n: int) -> None:
    """Number statistics for the key."""
    a = abs(n)
    small = a.bit_length() <= _TRIAL_BITS

    print(f"{Fore.CYAN}{Style.BRIGHT}Number statistics:{Style.RESET_ALL}")
    print(f"  Number:               {Fore.YELLOW}{Style.BRIGHT}{abbr_int(n)}{Style.RESET_ALL}")
    print(f"  Prime (trial):        {_yes_no(is_prime(n)) if small else 'skipped (too large)'}")
    print(f"  Likely prime:         {_yes_no(is_likely_prime(n))}")
    print(f"  Power of two:         {_yes_no(is_power_of_two(n))}")
    print(f"  Square root (floor):  {abbr_int(integer_sqrt(a))}")
    print(f"  Cube root (floor):    {abbr_int(integer_sqrt(a, 3))}")
    if small:
        divs = divisors(n)
        label = f"Divisors ({len(divs)}):"
        print(f"  {label:<22}{format_int_list(divs)}")
    else:
        print("  Divisors:             skipped (too large)")
    print(f"  Factorization:        {format_factorization(factorint(a)) if a > 1 else a}")
