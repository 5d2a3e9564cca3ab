"""End-to-end tests: registry discovery, techniques and the lumat-tool CLI."""

import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from lumat_checker.__main__ import build_contexts, main
from lumat_checker.core.config import DEFAULT_SETTINGS
from lumat_checker.core.report import format_json, format_text
from lumat_checker.core.scale_file import load_scale_file, parse_scale_string
from lumat_checker.core.types import Report
from lumat_checker.registry import all_techniques, discover, get
from lumat_checker.techniques.autofix import parse_target

SCALES = {
    'steps': [98, 90, 70, 50, 30, 14],
    'scales': [
        {'name': 'blue', 'hue': 240, 'manualChroma': 0.15, 'targetBackground': 'white'},
        {'name': 'grey', 'hue': 0, 'manualChroma': 0.01},
    ],
}

DARK_SCALES = {
    'steps': [90, 50, 20],
    'scales': [{'name': 'night', 'hue': 240, 'manualChroma': 0.1, 'targetBackground': 'canvas-bg (E)'}],
}


def _dark_contexts():
    parsed = parse_scale_string(json.dumps(DARK_SCALES))
    assert parsed is not None
    return build_contexts(parsed, DEFAULT_SETTINGS)


@pytest.fixture
def scale_path(tmp_path: Path) -> Path:
    path = tmp_path / 'scales.json'
    path.write_text(json.dumps(SCALES))
    return path


def _run(monkeypatch: pytest.MonkeyPatch, *argv: str) -> None:
    monkeypatch.setattr(sys, 'argv', ['lumat-tool', *argv])
    main()


class TestRegistry:
    def test_discovers_all(self) -> None:
        assert set(discover()) == {
            'all',
            'autofix',
            'compliance',
            'guidelines',
            'matrix',
            'opacity',
            'pairs',
            'recommend',
        }

    def test_get_unknown(self) -> None:
        with pytest.raises(KeyError):
            get('nope')

    def test_all_techniques_is_registry(self) -> None:
        assert all_techniques() is discover()


class TestTechniquesDirect:
    def _contexts(self):
        parsed = parse_scale_string(json.dumps(SCALES))
        assert parsed is not None
        return build_contexts(parsed, DEFAULT_SETTINGS)

    def test_matrix(self) -> None:
        report = Report()
        get('matrix').execute(self._contexts(), report, SimpleNamespace())
        data = report.scales['blue']['techniques']['matrix']
        assert data['pairs'] == 6 * 5
        assert sum(data['wcag_levels'].values()) == 30

    def test_pairs_filter(self) -> None:
        report = Report()
        args = SimpleNamespace(min_apca=60.0, max_apca=None, min_wcag=None, max_wcag=None, wcag=False)
        get('pairs').execute(self._contexts(), report, args)
        data = report.scales['blue']['techniques']['pairs']
        assert data['total'] == 30
        assert data['matched'] == len(data['filtered'])
        assert all(abs(p['apca']) >= 60 for p in data['filtered'])
        assert set(data['ranked']) == {'WCAG 3:1', 'WCAG 4.5:1', 'APCA 45 Lc', 'APCA 70 Lc', 'APCA 90 Lc'}

    def test_pairs_without_bounds_keeps_everything(self) -> None:
        report = Report()
        get('pairs').execute(self._contexts(), report, SimpleNamespace())
        data = report.scales['grey']['techniques']['pairs']
        assert data['matched'] == data['total']

    def test_compliance_uses_preset(self) -> None:
        report = Report()
        get('compliance').execute(self._contexts(), report, SimpleNamespace(preset='APCA_GOLD'))
        blue = report.scales['blue']['techniques']['compliance']
        assert blue['metric'] == 'apca'
        assert blue['target_background'] == 'white'
        assert report.pass_count + report.fail_count == 2

    def test_compliance_preset_file(self, tmp_path: Path) -> None:
        preset = tmp_path / 'wcag.json'
        preset.write_text('{"type": "wcag", "value": 4.5}')
        report = Report()
        get('compliance').execute(self._contexts(), report, SimpleNamespace(preset=str(preset)))
        assert report.scales['blue']['techniques']['compliance']['metric'] == 'wcag'

    def test_recommend(self) -> None:
        report = Report()
        get('recommend').execute(self._contexts(), report, SimpleNamespace(background='#000000'))
        assert report.scales['blue']['techniques']['recommend']['preset'] == 'body-text-black'
        assert report.scales['grey']['techniques']['recommend']['background'] == '#000000'

    def test_guidelines_flag_wcag_levels(self) -> None:
        report = Report()
        get('guidelines').execute(self._contexts(), report, SimpleNamespace())
        steps = {s['step']: s for s in report.scales['blue']['techniques']['guidelines']['steps']}
        assert steps[14]['meets_aa'] and steps[14]['meets_aaa']
        assert steps[98]['meets_aa']  # against the reference black
        assert set(steps[50]) >= {'recommendations', 'warnings', 'best_pairings'}

    def test_compliance_stats(self) -> None:
        report = Report()
        get('compliance').execute(self._contexts(), report, SimpleNamespace())
        stats = report.stats['compliance']
        assert stats['total_swatches'] == 12
        assert stats['total_passing'] + stats['total_failing'] == 12
        levels = ('scales_fully_compliant', 'scales_partially_compliant', 'scales_non_compliant')
        assert sum(stats[k] for k in levels) == 2

    def test_compliance_non_utf8_preset_file(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        preset = tmp_path / 'wcag.json'
        preset.write_bytes(b'{"type": "wcag", "value": "\xff\xfe"}')
        report = Report()
        get('compliance').execute(self._contexts(), report, SimpleNamespace(preset=str(preset)))
        # falls back to the APCA body-text default
        assert report.scales['blue']['techniques']['compliance']['metric'] == 'apca'
        assert 'Cannot read preset file' in caplog.text

    def test_recommend_uses_scale_background(self) -> None:
        report = Report()
        get('recommend').execute(_dark_contexts(), report, SimpleNamespace())
        data = report.scales['night']['techniques']['recommend']
        assert data == {'background': '#07070d', 'preset': 'body-text-black'}

    def test_autofix_recommendation_uses_scale_background(self, tmp_path: Path) -> None:
        report = Report()
        get('autofix').execute(_dark_contexts(), report, SimpleNamespace(out_dir=str(tmp_path)))
        assert report.scales['night']['techniques']['autofix']['preset'] == 'body-text-black'

    def test_autofix_background_flag_wins(self, tmp_path: Path) -> None:
        report = Report()
        args = SimpleNamespace(out_dir=str(tmp_path), background='canvas-bg')
        get('autofix').execute(_dark_contexts(), report, args)
        assert report.scales['night']['techniques']['autofix']['preset'] == 'body-text-white'

    def test_autofix_pair_preset(self, tmp_path: Path) -> None:
        report = Report()
        get('autofix').execute(self._contexts(), report, SimpleNamespace(out_dir=str(tmp_path), preset='wcag-aa'))
        blue = report.scales['blue']['techniques']['autofix']
        assert blue['metric'] == 'wcag'
        assert blue['total_pairs'] == 15
        assert 0 <= blue['pairs_before'] <= 15
        assert blue['steps'] == [98, 90, 70, 50, 30, 14]
        assert blue['file'] == str(tmp_path / 'autofix.json')

        fixed = load_scale_file(tmp_path / 'autofix.json')
        assert fixed is not None
        assert [s.contrast_mode for s in fixed.scales] == ['apca-fixed', 'luminance-matched']

    def test_opacity_apca(self) -> None:
        report = Report()
        get('opacity').execute(self._contexts(), report, SimpleNamespace())
        data = report.scales['blue']['techniques']['opacity']
        assert (data['metric'], data['target']) == ('apca', 75.0)
        by_step = {s['step']: s['min_opacity'] for s in data['steps']}
        assert by_step[98] is None
        assert 1 <= by_step[14] <= 100
        assert data['steps'][-1]['base_opacity'] == 100
        assert data['base'] == data['steps'][-1]['color']

    def test_opacity_wcag(self) -> None:
        report = Report()
        args = SimpleNamespace(wcag=True, min_wcag=3.0, background='#FFFFFF')
        get('opacity').execute(self._contexts(), report, args)
        data = report.scales['grey']['techniques']['opacity']
        assert (data['metric'], data['target'], data['background']) == ('wcag', 3.0, '#FFFFFF')
        assert len(data['steps']) == 6


class TestParseTarget:
    def test_full(self) -> None:
        target = parse_target('60@#000000:should')
        assert target is not None
        assert (target.min_lc, target.background, target.priority) == (60.0, '#000000', 'should')

    def test_default_priority(self) -> None:
        target = parse_target('75@#FFFFFF')
        assert target is not None
        assert target.priority == 'must'

    @pytest.mark.parametrize('text', ['75', 'x@#fff', '75@#fff:urgent', '75@'])
    def test_malformed(self, text: str) -> None:
        assert parse_target(text) is None


class TestCli:
    def test_all_json(
        self, tmp_path: Path, scale_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _run(monkeypatch, 'all', str(tmp_path), str(scale_path), '--json')
        out = json.loads(capsys.readouterr().out)
        assert out['steps'] == [98, 90, 70, 50, 30, 14]
        assert [s['name'] for s in out['scales']] == ['blue', 'grey']
        techniques = out['scales'][0]['techniques']
        assert set(techniques) == {'compliance', 'guidelines', 'matrix', 'opacity', 'pairs', 'recommend'}
        assert out['scales'][0]['hue'] == 240.0
        assert out['summary']['total'] == 2
        assert out['stats']['compliance']['total_swatches'] == 12

    def test_text_output(
        self, tmp_path: Path, scale_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _run(monkeypatch, 'matrix', str(tmp_path), str(scale_path))
        out = capsys.readouterr().out
        assert out.startswith('lumat-tool: scales.json (2 scales)')
        assert '── blue [H240 C0.150]' in out
        assert 'matrix: 30 pairs' in out

    def test_autofix_writes_file(
        self, tmp_path: Path, scale_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        out_dir = tmp_path / 'out'
        _run(monkeypatch, 'autofix', str(out_dir), str(scale_path), '--preset', 'body-text-white', '--json')
        out = json.loads(capsys.readouterr().out)
        data = out['scales'][0]['techniques']['autofix']
        assert data['preset'] == 'body-text-white'
        assert data['file'] == str(out_dir / 'autofix.json')

        fixed = load_scale_file(str(out_dir / 'autofix.json'))
        assert fixed is not None
        assert [s.contrast_mode for s in fixed.scales] == ['apca-fixed', 'apca-fixed']
        assert fixed.scales[0].custom_lightness_steps[0] == 98
        assert fixed.scales[0].custom_lightness_steps[-1] == 14

        # input file untouched
        assert json.loads(scale_path.read_text()) == SCALES

    def test_autofix_custom_target(
        self, tmp_path: Path, scale_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _run(monkeypatch, 'autofix', str(tmp_path), str(scale_path), '--target', '60@#FFFFFF', '--json')
        out = json.loads(capsys.readouterr().out)
        data = out['scales'][0]['techniques']['autofix']
        assert data['preset'] == 'custom'
        assert data['targets'] == [{'min_lc': 60.0, 'background': '#FFFFFF', 'priority': 'must', 'name': None}]
        assert 'average_lc' in data
        for adj in data['lightness_adjustments']:
            assert abs(adj['achieved_lc'] - 60) <= 1.0

    def test_fail_under_exits(self, tmp_path: Path, scale_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'compliance', str(tmp_path), str(scale_path), '--fail-under', '101')
        assert exc.value.code == 1

    def test_fail_under_passes(self, tmp_path: Path, scale_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _run(monkeypatch, 'compliance', str(tmp_path), str(scale_path), '--preset', 'APCA_BODY_TEXT', '-f', '0')

    def test_missing_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'matrix', str(tmp_path), str(tmp_path / 'absent.json'))
        assert exc.value.code == 1
        assert 'scale file not found' in capsys.readouterr().err

    def test_unparsable_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        bad = tmp_path / 'bad.json'
        bad.write_text('{nope')
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'matrix', str(tmp_path), str(bad))
        assert exc.value.code == 1
        assert 'no usable scales' in capsys.readouterr().err

    def test_non_utf8_scale_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        bad = tmp_path / 'bad.json'
        bad.write_bytes(b'{"name": "\xff\xfe", "hue": 240}')
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'matrix', str(tmp_path), str(bad))
        assert exc.value.code == 1
        assert 'no usable scales' in capsys.readouterr().err

    def test_autofix_pair_preset_text(
        self, tmp_path: Path, scale_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _run(monkeypatch, 'autofix', str(tmp_path), str(scale_path), '--preset', 'apca-body')
        out = capsys.readouterr().out
        assert 'autofix (apca-body)' in out
        assert 'apca pairs:' in out
        assert '- Switched to luminance-matched mode for grayscale consistency' in out

    def test_help_lists_techniques(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        _run(monkeypatch, 'help')
        out = capsys.readouterr().out
        for name in ('autofix', 'compliance', 'matrix', 'pairs'):
            assert name in out

    def test_help_for_technique(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        _run(monkeypatch, 'help', 'autofix')
        assert 'LC@HEX[:PRIORITY]' in capsys.readouterr().out

    def test_help_unknown(self, monkeypatch: pytest.MonkeyPatch) -> None:
        with pytest.raises(SystemExit):
            _run(monkeypatch, 'help', 'nope')

    def test_step_labels_from_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / 'one.json'
        path.write_text('{"name": "red", "hue": 25}')
        monkeypatch.setenv('LUMAT_STEP_LABELS', '90,50,10')
        _run(monkeypatch, 'matrix', str(tmp_path), str(path), '--json')
        out = json.loads(capsys.readouterr().out)
        assert out['steps'] == [90, 50, 10]
        assert out['scales'][0]['techniques']['matrix']['pairs'] == 6


class TestReportFormat:
    def test_empty_report(self) -> None:
        text = format_text(Report(input_path='/x/scales.json'))
        assert text.startswith('lumat-tool: scales.json (0 scales)')
        assert 'PASS' not in text

    def test_json_summary(self) -> None:
        report = Report(input_path='s.json')
        report.add('blue', 'recommend', {'background': '#FFFFFF', 'preset': 'ui-white'})
        report.record_pass('blue')
        out = json.loads(format_json(report))
        assert out['summary'] == {'total': 1, 'pass': 1, 'fail': 0}
        assert out['scales'][0]['hue'] is None

    def test_unknown_technique_falls_back(self) -> None:
        report = Report(input_path='s.json')
        report.add('blue', 'custom', {'value': 3})
        assert 'custom.value: 3' in format_text(report)

    def test_compliance_stats_line(self) -> None:
        report = Report(input_path='s.json')
        report.stats['compliance'] = {
            'total_swatches': 10,
            'total_passing': 4,
            'total_failing': 6,
            'average_compliance': 0.4,
            'scales_fully_compliant': 0,
            'scales_partially_compliant': 1,
            'scales_non_compliant': 0,
        }
        assert 'compliance: 4/10 swatches pass (40%), 0 scale(s) fully compliant' in format_text(report)
        assert json.loads(format_json(report))['stats']['compliance']['total_passing'] == 4

    def test_no_stats_key_without_compliance(self) -> None:
        assert 'stats' not in json.loads(format_json(Report(input_path='s.json')))

    def test_opacity_line(self) -> None:
        report = Report(input_path='s.json')
        steps = [
            {'step': 90, 'color': '#e0e0e0', 'min_opacity': None, 'base_opacity': 15},
            {'step': 10, 'color': '#111111', 'min_opacity': 58, 'base_opacity': 100},
        ]
        data = {'background': '#ffffff', 'metric': 'apca', 'target': 75.0, 'base': '#111111', 'steps': steps}
        report.add('grey', 'opacity', data)
        text = format_text(report)
        assert 'opacity on #ffffff (apca ≥ 75): 90:-  10:58%' in text
        assert 'as #111111: 90:15%  10:100%' in text
