import pytest

from mlpnet.core.errors import FormatError, IOFailure
from mlpnet.core.types import Sample
from mlpnet.data import registry


def test_parity3_dataset():
    spec = registry.get("parity3")
    assert spec.input_size == 3
    assert spec.output_size == 1
    assert len(spec) == 8
    table = {tuple(int(v) for v in s.inputs): int(s.targets[0]) for s in spec.samples}
    assert table[(0, 0, 0)] == 0
    assert table[(0, 0, 1)] == 1
    assert table[(1, 1, 1)] == 1
    assert all(target == sum(bits) % 2 for bits, target in table.items())


def test_available_datasets_lists_builtins():
    names = list(registry.available_datasets())
    assert "parity3" in names
    assert "csv" in names
    assert list(registry.names()) == names


def test_unknown_dataset():
    with pytest.raises(KeyError):
        registry.get("does-not-exist")


def test_register_custom_dataset():
    @registry.register_dataset("unit-xor")
    def _make(**_):
        samples = tuple(
            Sample(inputs=(a, b), targets=(float(int(a) ^ int(b)),))
            for a in (0.0, 1.0)
            for b in (0.0, 1.0)
        )
        return registry.DatasetSpec("unit-xor", samples, 2, 1)

    spec = registry.get("unit-xor")
    assert len(spec) == 4
    assert spec.samples[3].targets == (0.0,)


def test_csv_dataset(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("0,0,1,0.5\n1,0,0,0.25\n")
    spec = registry.get("csv", path=path, n_inputs=2)
    assert spec.input_size == 2
    assert spec.output_size == 2
    assert spec.samples[0] == Sample(inputs=(0.0, 0.0), targets=(1.0, 0.5))
    assert spec.provenance["rows"] == 2


def test_csv_dataset_with_header(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,b,c,y\n0,1,1,0\n1,1,1,1\n")
    spec = registry.get("csv", path=path, n_inputs=3, skip_header=True)
    assert len(spec) == 2
    assert spec.samples[1].targets == (1.0,)


def test_csv_dataset_errors(tmp_path):
    with pytest.raises(IOFailure):
        registry.get("csv", path=tmp_path / "missing.csv", n_inputs=1)

    text = tmp_path / "text.csv"
    text.write_text("0,a\n1,b\n")
    with pytest.raises(FormatError):
        registry.get("csv", path=text, n_inputs=1)

    narrow = tmp_path / "narrow.csv"
    narrow.write_text("0,1\n1,0\n")
    with pytest.raises(FormatError):
        registry.get("csv", path=narrow, n_inputs=2)

    empty = tmp_path / "empty.csv"
    empty.write_text("")
    with pytest.raises(FormatError):
        registry.get("csv", path=empty, n_inputs=1)


def test_register_loader_by_name():
    def _make():
        samples = (Sample(inputs=(1.0,), targets=(0.0,)), Sample(inputs=(0.0,), targets=(1.0,)))
        return registry.DatasetSpec("unit-not", samples, 1, 1)

    assert registry.register("unit-not", _make) is _make
    assert "unit-not" in registry.names()
    assert len(registry.get("unit-not")) == 2


def test_csv_header_row_is_data_unless_skipped(tmp_path):
    path = tmp_path / "labelled.csv"
    path.write_text("x1,x2,y\n0,1,1\n1,1,0\n")
    with pytest.raises(FormatError):
        registry.get("csv", path=path, n_inputs=2)
    spec = registry.get("csv", path=path, n_inputs=2, skip_header=True)
    assert [s.targets for s in spec.samples] == [(1.0,), (0.0,)]


def test_csv_rejects_unknown_options(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("0,1,1\n")
    with pytest.raises(TypeError):
        registry.get("csv", path=path, n_inputs=2, header=True)
    with pytest.raises(TypeError):
        registry.get("parity3", shuffle=True)
