"""Report builder: text and JSON output for cosaf results."""

from __future__ import annotations

import json
from typing import Any

from cosaf.core import colour
from cosaf.core.scheme import Scheme
from cosaf.core.types import Vision


def _lowest(scheme: Scheme) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for vision in Vision:
        c = scheme.get_lowest_difference_combination(vision)
        if c is None:
            out[vision.name.lower()] = None
            continue
        out[vision.name.lower()] = {'pair': [c.index1, c.index2], 'difference': round(c.difference, 2)}
    return out


def summarize(original: Scheme, adjusted: Scheme | None = None) -> dict[str, Any]:
    """Plain-dict summary shared by the text and JSON formats."""
    obj: dict[str, Any] = {
        'original': {
            'colors': [colour.to_hex(v.color) for v in original],
            'quality': round(original.quality, 4),
            'bottleneck': original.bottleneck_index,
            'lowest': _lowest(original),
        },
        'adjacencies': [list(pair) for pair in original.get_adjacencies()],
    }
    if adjusted is not None:
        obj['adjusted'] = {
            'colors': [colour.to_hex(v.color) for v in adjusted],
            'quality': round(adjusted.quality, 4),
            'lowest': _lowest(adjusted),
        }
        obj['drift'] = {
            'delta_e': round(Scheme.ave_delta_e(original, adjusted), 3),
            'delta_h': round(Scheme.ave_delta_h(original, adjusted), 3),
            'delta_t': round(Scheme.ave_delta_t(original, adjusted), 3),
        }
    return obj


def _lowest_line(lowest: dict[str, Any]) -> str:
    parts = []
    for name, entry in lowest.items():
        if entry is None:
            parts.append(f'{name[0].upper()}=-')
        else:
            parts.append(f'{name[0].upper()}={entry["difference"]:.2f}')
    return ' '.join(parts)


def format_text(original: Scheme, adjusted: Scheme | None = None) -> str:
    """Format an adjustment (or a bare scheme) as human-readable text."""
    summary = summarize(original, adjusted)
    lines = [f'cosaf: {original.size()} colours, {len(original.get_adjacencies())} adjacent pairs']
    lines.append('')

    orig = summary['original']
    lines.append(f'── original  quality={orig["quality"]:.3f}  bottleneck={orig["bottleneck"]}')
    lines.append(f'  colours: {" ".join(orig["colors"])}')
    lines.append(f'  lowest:  {_lowest_line(orig["lowest"])}')

    if adjusted is not None:
        adj = summary['adjusted']
        lines.append('')
        lines.append(f'── adjusted  quality={adj["quality"]:.3f}')
        lines.append(f'  colours: {" ".join(adj["colors"])}')
        lines.append(f'  lowest:  {_lowest_line(adj["lowest"])}')
        lines.append('')
        drift = summary['drift']
        lines.append(f'drift: ΔE={drift["delta_e"]:.2f}  ΔH={drift["delta_h"]:.2f}  ΔT={drift["delta_t"]:.2f}')
    return '\n'.join(lines)


def format_json(original: Scheme, adjusted: Scheme | None = None) -> str:
    """Format an adjustment (or a bare scheme) as JSON."""
    summary = summarize(original, adjusted)
    return json.dumps(summary, indent=2)
