import csv
import json

import pytest

from perceptronets.reporting import (
    CsvSink,
    HistorySink,
    JsonlSink,
    PlotAdapter,
    parameter_count,
    read_losses,
    summarize,
    write_manifest,
    write_summary,
)


def test_jsonl_sink_writes_tagged_records(tmp_path):
    sink = JsonlSink(tmp_path / "m.jsonl", kind="slp", seed=3)
    sink.on_epoch(1, {"loss": 0.5, "epoch_items": 4})
    sink(2, {"loss": 0.25, "epoch_items": 4})
    records = [json.loads(line) for line in (tmp_path / "m.jsonl").read_text().splitlines()]
    assert records[0] == {"epoch": 1, "kind": "slp", "split": "train", "seed": 3, "loss": 0.5, "epoch_items": 4.0}
    assert read_losses(tmp_path / "m.jsonl") == [0.5, 0.25]


def test_csv_sink_has_fixed_columns(tmp_path):
    sink = CsvSink(tmp_path / "m.csv", kind="mlp")
    sink.on_epoch(1, {"loss": 0.5, "epoch_items": 2, "extra": 1.0})
    with (tmp_path / "m.csv").open() as handle:
        rows = list(csv.DictReader(handle))
    assert rows == [{"epoch": "1", "epoch_items": "2.0", "kind": "mlp", "loss": "0.5", "split": "train"}]


def test_history_sink_keeps_losses():
    sink = HistorySink()
    sink(1, {"loss": 1.0})
    sink.on_epoch(2, {"loss": 0.5})
    assert sink.history == [(1, 1.0), (2, 0.5)]
    assert sink.losses == [1.0, 0.5]


def test_summarize_loss_curve():
    summary = summarize([0.8, 0.2, 0.4], {"accuracy": 0.9})
    assert summary["epochs"] == 3
    assert summary["loss"]["best_epoch"] == 2
    assert summary["loss"]["improvement"] == pytest.approx(0.5)
    assert summary["test"] == {"accuracy": 0.9}
    assert summarize([]) == {"version": 1, "epochs": 0}
    assert summarize([0.0, 0.0])["loss"]["improvement"] == 0.0


def test_write_summary_without_metrics_file(tmp_path):
    out = write_summary(tmp_path / "missing.jsonl", tmp_path / "s.json")
    assert json.loads(open(out).read()) == {"epochs": 0, "version": 1}


def test_manifest_describes_model(tmp_path):
    path = write_manifest(
        tmp_path / "manifest.json",
        config={"train": {"seed": 1}},
        dataset_provenance={"type": "truth-table"},
        kind="slp",
        model_dims=[2, 4, 1],
    )
    manifest = json.loads(open(path).read())
    assert manifest["model"] == {"kind": "slp", "dims": [2, 4, 1], "parameters": 17}
    assert manifest["environment"]["perceptronets"] == "0.1.0"
    assert parameter_count([2, 1]) == 3


def test_disabled_plot_adapter_writes_nothing(tmp_path):
    adapter = PlotAdapter(tmp_path / "plots")
    adapter.on_epoch(1, {"loss": 1.0})
    assert adapter.history == []
    assert adapter.close() is None
    assert adapter.decision_boundary(lambda item: 0, [[0.0, 0.0]], [0.0]) is None
    assert not (tmp_path / "plots").exists()


def test_plot_adapter_renders_figures(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter(1, {"loss": 1.0})
    adapter(2, {"loss": 0.5})
    assert adapter.close() == tmp_path / "loss.png"
    data = [[0.0, 0.0], [1.0, 1.0]]
    boundary = adapter.decision_boundary(lambda item: 1 if sum(item) > 1 else 0, data, [0.0, 1.0], resolution=10)
    assert boundary.exists()
    assert adapter.decision_boundary(lambda item: 0, [[0.0, 0.0, 0.0]], [0.0]) is None
