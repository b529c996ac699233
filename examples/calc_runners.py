"""Runners for ``calc.yaml``.

Each runner receives the request's flag bindings and the output stream;
whatever it returns is written to the output as well.
"""

from pathlib import Path


def add(bindings, out):
    return round(bindings["num1"] + bindings["num2"], bindings["precision"])


def total(bindings, out):
    numbers = bindings["numbers"]
    for n in numbers:
        out.write(f"+ {n}\n")
    return round(sum(numbers), bindings["precision"])


def word_count(bindings, out):
    path = Path(bindings["file"])
    text = path.read_text(encoding="utf-8")
    print(f"{path.name}: {len(text.splitlines())} lines, {len(text.split())} words")
