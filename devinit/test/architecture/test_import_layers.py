from __future__ import annotations

import pytest

from devinit.test.architecture._utils import (
    iter_source_files,
    matches_prefix,
    package_root,
    parse_imports,
)


@pytest.mark.parametrize(
    ("layer", "forbidden"),
    [
        ("core", ("devinit.platform", "devinit.output", "devinit.services", "devinit.cli")),
        ("platform", ("devinit.output", "devinit.services", "devinit.cli")),
        ("output", ("devinit.services", "devinit.cli")),
        ("services", ("devinit.cli",)),
    ],
)
def test_layers_only_import_downwards(layer: str, forbidden: tuple[str, ...]) -> None:
    root = package_root()
    offenders: list[str] = []

    for file_path in iter_source_files(root / layer):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if any(matches_prefix(item.module, prefix) for prefix in forbidden):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{layer} dependency violations:\n" + "\n".join(offenders)
