"""Tests for the end-to-end check pipeline, alerts and plugin output."""

from __future__ import annotations

import unittest

from ds_pairing.alerts import NagiosState, canonical_severity, health_rollup, mismatch_alerts, nagios_state
from ds_pairing.check import compile_index, run_check
from ds_pairing.config import build_config
from ds_pairing.errors import TagNotSet
from ds_pairing.models.results import EvaluationResult, MismatchedDatastore, MismatchRecord
from ds_pairing.report import mismatch_rows, one_line_summary
from ds_pairing.snapshot import parse_snapshot

from _factories import snapshot_dict


def _config(**settings):
    base = {"custom_attribute_name": "Location", "custom_attribute_prefix_separator": "-"}
    base.update(settings)
    return build_config(base)


def _result():
    return EvaluationResult(
        mismatches={
            "web02": MismatchRecord(
                host_name="esx1",
                host_tag_value="DC1",
                datastores=[
                    MismatchedDatastore(id="datastore-5", name="zeta", tag_value="DC2"),
                    MismatchedDatastore(id="datastore-6", name="alpha", tag_value="NotSet"),
                ],
            ),
            "App01": MismatchRecord(
                host_name="esx2",
                host_tag_value="DC2",
                datastores=[MismatchedDatastore(id="datastore-1", name="D1", tag_value="DC1")],
            ),
        },
        evaluated_vms=10,
        total_vms=12,
        resource_pools=["Production", "Lab", "Staging"],
    )


class RunCheckTests(unittest.TestCase):

    def test_strict_mode_fails_on_untagged_datastore(self):
        with self.assertRaises(TagNotSet):
            run_check(parse_snapshot(snapshot_dict()), _config())

    def test_ignored_datastore_is_not_tagged(self):
        outcome = run_check(parse_snapshot(snapshot_dict()), _config(ignored_datastores=["D3"]))
        self.assertEqual(outcome.state, NagiosState.CRITICAL)
        self.assertEqual(list(outcome.result.mismatches), ["app02"])
        self.assertEqual(outcome.result.mismatches["app02"].datastore_names, ["D2"])
        # lab01 is powered off
        self.assertEqual(outcome.result.evaluated_vms, 2)
        self.assertEqual(outcome.result.total_vms, 3)
        self.assertTrue(outcome.summary_line.startswith("CRITICAL: 1 mismatched"))
        self.assertEqual(len(outcome.alerts), 1)

    def test_lenient_mode_reports_untagged_datastore(self):
        outcome = run_check(
            parse_snapshot(snapshot_dict()),
            _config(ignore_missing_custom_attribute=True, evaluate_powered_off_vms=True),
        )
        self.assertEqual(sorted(outcome.result.mismatches), ["app02", "lab01"])
        self.assertEqual(outcome.result.mismatches["lab01"].datastores[0].tag_value, "NotSet")
        self.assertIn('Datastores missing Custom Attribute "Location":', outcome.report)
        self.assertIn("* D3", outcome.report)

    def test_clean_run_is_ok(self):
        outcome = run_check(
            parse_snapshot(snapshot_dict()),
            _config(ignored_datastores=["D2", "D3"], evaluate_powered_off_vms=True),
        )
        self.assertEqual(outcome.state, NagiosState.OK)
        self.assertEqual(outcome.result.mismatches, {})
        self.assertEqual(
            outcome.summary_line,
            "OK: No mismatched Host/Datastore/VM pairings detected (evaluated 3 VMs, 2 Resource Pools)",
        )
        self.assertIn("No mismatched Host/Datastore/VM pairings detected.", outcome.report)

    def test_literal_mode_pairs_nothing_with_rack_suffixes(self):
        cfg = build_config({"custom_attribute_name": "Location", "ignored_datastores": ["D3"]})
        index, missing = compile_index(parse_snapshot(snapshot_dict()), cfg)
        self.assertTrue(all(p.is_stub for p in index.values()))
        self.assertEqual(missing, [])

    def test_prefix_mode_index(self):
        index, _ = compile_index(parse_snapshot(snapshot_dict()), _config(ignored_datastores=["D3"]))
        self.assertEqual([ds.name for ds in index["host-1"].datastores], ["D1"])
        self.assertEqual([ds.name for ds in index["host-2"].datastores], ["D2"])

    def test_excluded_pool(self):
        outcome = run_check(
            parse_snapshot(snapshot_dict()),
            _config(ignored_datastores=["D3"], exclude_resource_pools=["Production"]),
        )
        self.assertEqual(outcome.result.evaluated_vms, 0)
        self.assertEqual(outcome.result.resource_pools, ["Lab"])


class ReportTests(unittest.TestCase):

    def test_summary_with_mismatches(self):
        line = one_line_summary(NagiosState.CRITICAL, _result())
        self.assertEqual(
            line,
            "CRITICAL: 2 mismatched Host/Datastore/VM pairings detected (evaluated 10 VMs, 3 Resource Pools)",
        )

    def test_rows_sorted(self):
        rows = mismatch_rows(_result())
        self.assertEqual([r["vm"] for r in rows], ["App01", "web02"])
        self.assertEqual(rows[1]["datastores"], ["alpha", "zeta"])

    def test_long_report_settings_footer(self):
        outcome = run_check(
            parse_snapshot(snapshot_dict()),
            _config(ignored_datastores=["D3"], ignored_vms=["nope"], include_resource_pools=["Production"]),
        )
        report = outcome.report
        self.assertIn("* app02: [esx1, D2]", report)
        self.assertIn("is a fatal condition", report)
        self.assertIn("* No Hosts or Datastores are missing specified Custom Attribute", report)
        self.assertIn('* Custom Attribute Prefix Separator: [Host: "-", Datastore: "-"]', report)
        self.assertIn("* vSphere environment: vc1.example.com", report)
        self.assertIn("* VMs (evaluated: 2, total: 3)", report)
        self.assertIn("* Powered off VMs evaluated: false", report)
        self.assertIn("* Specified VMs to exclude (1): [nope]", report)
        self.assertIn("* Specified Datastores to exclude (1): [D3]", report)
        self.assertIn("* Specified Resource Pools to explicitly include (1): [Production]", report)
        self.assertIn("* Resource Pools evaluated (1): [Production]", report)


class AlertTests(unittest.TestCase):

    def test_one_alert_per_vm(self):
        alerts = mismatch_alerts(_result())
        self.assertEqual(len(alerts), 2)
        self.assertEqual(alerts[0]["severity"], "CRITICAL")
        self.assertEqual(alerts[0]["category"], "pairing")
        self.assertEqual(alerts[0]["detail"]["vm"], "App01")
        self.assertEqual(alerts[1]["affected_items"], ["alpha", "zeta"])

    def test_rollups(self):
        alerts = mismatch_alerts(_result())
        self.assertEqual(health_rollup(alerts), "CRITICAL")
        self.assertEqual(health_rollup([]), "HEALTHY")
        self.assertEqual(health_rollup([{"severity": "warning"}]), "WARNING")

    def test_unknown_severity_is_info(self):
        self.assertEqual(canonical_severity("critical"), "CRITICAL")
        self.assertEqual(canonical_severity("HIGH"), "INFO")
        self.assertEqual(canonical_severity(None), "INFO")
        self.assertEqual(health_rollup([{"severity": "notice"}]), "HEALTHY")

    def test_nagios_state_mapping(self):
        self.assertEqual(nagios_state("HEALTHY"), NagiosState.OK)
        self.assertEqual(nagios_state("WARNING"), NagiosState.WARNING)
        self.assertEqual(nagios_state("CRITICAL"), NagiosState.CRITICAL)
        self.assertEqual(nagios_state("???"), NagiosState.UNKNOWN)
        self.assertEqual(int(NagiosState.UNKNOWN), 3)
