"""Report builder — text and JSON output for lumat-tool results."""

import json
import os
from typing import Any

from lumat_checker.core.types import Report


def _format_technique(tech_name: str, tech_data: dict[str, Any]) -> list[str]:
    lines = []
    if tech_name == 'matrix':
        levels = '  '.join(f'{k}:{v}' for k, v in tech_data['wcag_levels'].items())
        lines.append(f'  matrix: {tech_data["pairs"]} pairs  {levels}  APCA≥pass: {tech_data["apca_passing"]}')
    elif tech_name == 'pairs':
        lines.append(f'  pairs: {tech_data["matched"]}/{tech_data["total"]} within filter')
        for label, top in tech_data.get('ranked', {}).items():
            shown = ', '.join(f'{p["fg"]}/{p["bg"]}' for p in top) or '-'
            lines.append(f'    {label:<11} {shown}')
    elif tech_name == 'guidelines':
        for g in tech_data['steps']:
            mark = ' ⚠' if g['warnings'] else ''
            pairs = ','.join(str(p) for p in g['best_pairings']) or '-'
            lines.append(f'  {g["step"]:>3} {g["color"]}  {g["recommendations"][0]}  pairs: {pairs}{mark}')
    elif tech_name == 'compliance':
        mark = '✓' if tech_data['pass'] else '✗'
        rec = tech_data['recommended_step']
        lines.append(
            f'  compliance: {tech_data["passing"]}/{tech_data["total"]} on {tech_data["target_background"]} '
            f'({tech_data["compliance_rate"] * 100:.0f}%)  recommended: {rec if rec is not None else "-"}  {mark}'
        )
    elif tech_name == 'autofix':
        mark = '✓' if tech_data['success'] else '✗'
        lines.append(f'  autofix ({tech_data["preset"]}): {mark}')
        if 'pairs_after' in tech_data:
            lines.append(
                f'    {tech_data["metric"]} pairs: {tech_data["pairs_before"]} → {tech_data["pairs_after"]}'
                f' of {tech_data["total_pairs"]}'
            )
        for line in tech_data['improvements']:
            lines.append(f'    - {line}')
        for adj in tech_data['lightness_adjustments']:
            lines.append(f'    step[{adj["step"]}] {adj["before"]} → {adj["after"]}  Lc {adj["achieved_lc"]:.1f}')
        if tech_data.get('file'):
            lines.append(f'    wrote {tech_data["file"]}')
    elif tech_name == 'opacity':
        shown = '  '.join(
            f'{s["step"]}:{s["min_opacity"]}%' if s['min_opacity'] is not None else f'{s["step"]}:-'
            for s in tech_data['steps']
        )
        goal = f'{tech_data["metric"]} ≥ {tech_data["target"]:g}'
        lines.append(f'  opacity on {tech_data["background"]} ({goal}): {shown}')
        if tech_data.get('base'):
            alphas = '  '.join(f'{s["step"]}:{s["base_opacity"]}%' for s in tech_data['steps'])
            lines.append(f'    as {tech_data["base"]}: {alphas}')
    elif tech_name == 'recommend':
        lines.append(f'  recommended preset on {tech_data["background"]}: {tech_data["preset"]}')
    else:
        for k, v in tech_data.items():
            lines.append(f'  {tech_name}.{k}: {v}')
    return lines


def format_text(report: Report) -> str:
    """Format report as human-readable text."""
    lines = []
    header = f'lumat-tool: {os.path.basename(report.input_path)} ({len(report.scales)} scales)'
    if report.step_labels:
        header += f' — steps {",".join(str(s) for s in report.step_labels)}'
    lines.append(header)
    lines.append('')

    for scale_name, scale_data in report.scales.items():
        hue, chroma = scale_data.get('hue'), scale_data.get('chroma')
        params = f'[H{hue:g} C{chroma:.3f}]' if hue is not None and chroma is not None else ''
        lines.append(f'── {scale_name} {params}')

        for tech_name, tech_data in scale_data.get('techniques', {}).items():
            lines.extend(_format_technique(tech_name, tech_data))
        lines.append('')

    stats = report.stats.get('compliance')
    if stats:
        lines.append(
            f'compliance: {stats["total_passing"]}/{stats["total_swatches"]} swatches pass '
            f'({stats["average_compliance"] * 100:.0f}%), {stats["scales_fully_compliant"]} scale(s) fully compliant'
        )
    total = report.pass_count + report.fail_count
    if total > 0:
        lines.append(f'PASS {report.pass_count}/{total}  FAIL {report.fail_count}/{total}')
    return '\n'.join(lines)


def format_json(report: Report) -> str:
    """Format report as JSON."""
    obj: dict[str, Any] = {
        'input': report.input_path,
        'steps': report.step_labels,
        'scales': [],
    }
    for scale_name, scale_data in report.scales.items():
        obj['scales'].append(
            {
                'name': scale_name,
                'hue': scale_data.get('hue'),
                'chroma': scale_data.get('chroma'),
                'techniques': scale_data.get('techniques', {}),
            }
        )

    if report.stats:
        obj['stats'] = report.stats
    obj['summary'] = {
        'total': report.pass_count + report.fail_count,
        'pass': report.pass_count,
        'fail': report.fail_count,
    }
    return json.dumps(obj, indent=2)
