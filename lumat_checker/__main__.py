"""lumat-tool — Contrast analysis and APCA auto-fix for perceptual colour scales.

Usage: uv run lumat-tool <technique> <out_dir> <scales.json> [options]

Techniques are auto-discovered from lumat_checker/techniques/.
Each technique module's docstring is its documentation.
Run `lumat-tool help <technique>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, lumat-tool reads LUMAT_* lines from the nearest
  .env file walking up from the current directory, stopping at the .git boundary.
  The process environment itself is never modified.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import importlib
import logging
import os
import sys

from lumat_checker import registry
from lumat_checker.core.config import Settings, configure_logging
from lumat_checker.core.generator import generate_scale, scale_steps
from lumat_checker.core.report import format_json, format_text
from lumat_checker.core.scale_file import ScaleFile, load_scale_file
from lumat_checker.core.types import Report, ScaleContext

logger = logging.getLogger('lumat_checker')


def _load_technique_module(name: str) -> object:
    """Load the raw module for a technique (for docstring access)."""
    return importlib.import_module(f'lumat_checker.techniques.{name}')


def _short_doc(name: str, fallback: str) -> str:
    doc = (_load_technique_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _build_parser() -> argparse.ArgumentParser:
    techniques = registry.all_techniques()

    epilog = (
        'Examples:\n'
        '  lumat-tool matrix ./out scales.json\n'
        '  lumat-tool pairs ./out scales.json --min-apca 60 --json\n'
        '  lumat-tool compliance ./out scales.json --preset WCAG_AA_NORMAL\n'
        '  lumat-tool all ./out scales.json --fail-under=80\n'
        '  lumat-tool autofix ./out scales.json --preset body-text-white\n'
        '  lumat-tool autofix ./out scales.json --target 75@#FFFFFF:must\n'
        '  lumat-tool autofix ./out scales.json --preset wcag-aa\n'
        '  lumat-tool opacity ./out scales.json --min-apca 60\n'
        '  lumat-tool help autofix\n'
        '\n'
        'Env vars (set in .env or environment):\n'
        '  LUMAT_STEP_LABELS=100,90,80,...  default step labels\n'
        '  LUMAT_APCA_PASS=60               |Lc| pass mark for pairs\n'
        '  LUMAT_LOG_LEVEL=INFO             logging level\n'
    )
    parser = argparse.ArgumentParser(
        prog='lumat-tool',
        description='Contrast analysis and APCA auto-fix for perceptual colour scales.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    parser.add_argument('--log-level', metavar='LEVEL', default=None, help='Logging level (overrides LUMAT_LOG_LEVEL)')
    sub = parser.add_subparsers(dest='technique', help='Technique to run')

    for name, tech in sorted(techniques.items()):
        p = sub.add_parser(name, help=_short_doc(name, tech.help))
        p.add_argument('out_dir', help='Working directory for artefacts')
        p.add_argument('scales', help='Path to scale definition JSON')
        p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
        p.add_argument('-p', '--preset', help='Contrast preset (compliance) or auto-fix preset (autofix)')
        p.add_argument(
            '-t',
            '--target',
            action='append',
            metavar='LC@HEX[:PRIORITY]',
            help='APCA target for autofix, repeatable',
        )
        p.add_argument(
            '-b',
            '--background',
            help='Background hex or preset for recommend, autofix, opacity (default: targetBackground, else white)',
        )
        p.add_argument('--min-apca', type=float, default=None, help='Minimum |Lc| for pairs and opacity')
        p.add_argument('--max-apca', type=float, default=None, help='Maximum |Lc| for pairs')
        p.add_argument('--min-wcag', type=float, default=None, help='Minimum WCAG ratio for pairs and opacity')
        p.add_argument('--max-wcag', type=float, default=None, help='Maximum WCAG ratio for pairs')
        p.add_argument('--wcag', action='store_true', help='Use WCAG instead of APCA for pairs and opacity')
        p.add_argument(
            '-f',
            '--fail-under',
            type=float,
            default=None,
            metavar='N',
            help='Exit 1 if any scale compliance is below N percent (CI gating)',
        )

    help_parser = sub.add_parser('help', help='Print full docs for a technique')
    help_parser.add_argument('command', nargs='?', help='Technique name')

    return parser


def _print_help(command: str | None) -> None:
    """Print full module docstring for a technique."""
    techniques = registry.all_techniques()

    if command is None:
        print('Available techniques:\n')
        for name, tech in sorted(techniques.items()):
            print(f'  {name:<12} {_short_doc(name, tech.help)}')
        print('\nRun: lumat-tool help <technique> for full docs.')
        return

    if command not in techniques:
        print(f'Unknown technique: {command}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(techniques))}', file=sys.stderr)
        sys.exit(1)

    doc = (_load_technique_module(command).__doc__ or '').strip()
    if not doc:
        print(f'(No module docs for {command!r})')
        return
    print(doc)


def _check_fail_under(report: Report, threshold: float) -> bool:
    """Return True if any scale's compliance rate is below threshold percent."""
    failures = []
    for scale_name, scale_data in report.scales.items():
        compliance = scale_data.get('techniques', {}).get('compliance', {})
        rate = compliance.get('compliance_rate')
        if rate is not None and rate * 100 < threshold:
            failures.append((scale_name, rate * 100))

    if failures:
        print(f'\nFAIL: {len(failures)} scale(s) below {threshold:g}% compliance:')
        for scale_name, pct in failures:
            print(f'  {scale_name}: {pct:.0f}%')
        return True
    return False


def build_contexts(scale_file: ScaleFile, settings: Settings) -> list[ScaleContext]:
    """Generate the colours of every scale in the file.

    Steps: the scale's customLightnessSteps, else the file's steps, else the
    configured step labels.
    """
    contexts = []
    for scale in scale_file.scales:
        labels = tuple(scale_steps(scale, scale_file.steps or settings.step_labels))
        colors = generate_scale(scale, labels, calculate_contrast=True, settings=settings)
        contexts.append(ScaleContext(name=scale.name, scale=scale, labels=labels, colors=colors))
    return contexts


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # OS env vars always win over the .env file
    settings, env_path = Settings.load(getattr(args, 'env_file', None))
    configure_logging(args.log_level or settings.log_level)
    if env_path:
        logger.info('loaded %s', env_path)

    if not args.technique:
        parser.print_help()
        sys.exit(1)

    if args.technique == 'help':
        _print_help(getattr(args, 'command', None))
        return

    if not os.path.isfile(args.scales):
        print(f'Error: scale file not found: {args.scales}', file=sys.stderr)
        sys.exit(1)

    scale_file = load_scale_file(args.scales)
    if scale_file is None:
        print(f'Error: no usable scales in {args.scales}', file=sys.stderr)
        sys.exit(1)

    args.settings = settings
    scales = build_contexts(scale_file, settings)

    report = Report(input_path=args.scales, step_labels=list(scale_file.steps or settings.step_labels))
    for ctx in scales:
        report.set_scale(ctx.name, ctx.scale)

    tech = registry.get(args.technique)
    tech.execute(scales, report, args)

    if args.json:
        print(format_json(report))
    else:
        print(format_text(report))

    # CI gate: must happen after output so report is visible even on failure
    threshold = getattr(args, 'fail_under', None)
    if threshold is not None and _check_fail_under(report, threshold):
        sys.exit(1)


if __name__ == '__main__':
    main()
