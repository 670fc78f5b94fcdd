import csv

import pytest

import experiments as exp


def test_generators_are_seeded():
    for name in ("uniform256", "zipf64", "repetitive90", "english_like", "all_bytes"):
        assert exp.generate_dataset(name, 512, 1) == exp.generate_dataset(name, 512, 1)
        assert len(exp.generate_dataset(name, 512, 1)[1]) == 512

def test_generator_edge_cases():
    assert exp.generate_dataset("empty", 100, 0)[1] == b""
    assert len(set(exp.generate_dataset("single_byte", 100, 0)[1])) == 1
    assert set(exp.generate_dataset("all_bytes", 256, 0)[1]) == set(range(256))

def test_unknown_generator():
    with pytest.raises(ValueError):
        exp.generate_dataset("nope", 10, 0)

def test_entropy():
    assert exp.entropy_bits_per_symbol(b"") == 0.0
    assert exp.entropy_bits_per_symbol(b"aaaa") == 0.0
    assert exp.entropy_bits_per_symbol(b"ab" * 10) == pytest.approx(1.0)

def test_run_one_metrics():
    row = exp.run_one(b"hello world")
    assert row.correctness_ok == 1
    assert row.unique_symbols == 9
    assert row.file_size_bytes == 11
    assert row.compressed_bytes == row.header_bytes + (row.payload_bits + 7) // 8
    assert row.pad_bits == (8 - row.payload_bits % 8) % 8

def test_run_one_empty_input():
    row = exp.run_one(b"")
    assert row.correctness_ok == 1
    assert row.payload_bits == 1
    assert row.max_code_length == 1

def test_huffman_stays_within_one_bit_of_entropy():
    _, data = exp.generate_dataset("zipf64", 8 * 1024, 5)
    row = exp.run_one(data)
    assert row.entropy_bits_per_symbol <= row.bits_per_symbol < row.entropy_bits_per_symbol + 1.01


def test_main_writes_reports(tmp_path):
    rc = exp.main([
        "--outdir", str(tmp_path),
        "--runs", "2",
        "--exp1_size_kb", "1",
        "--exp1_generators", "zipf64,english_like",
        "--no_exp2",
    ])
    assert rc == 0
    assert (tmp_path / "exp1_compression_ratio.png").exists()
    assert (tmp_path / "exp1_bits_vs_entropy.png").exists()

    with (tmp_path / "metrics.csv").open(newline="") as f:
        rows = list(csv.DictReader(f))
    exp1 = [r for r in rows if r["exp_name"] == "exp1_distribution"]
    exp3 = [r for r in rows if r["exp_name"] == "exp3_edge_cases"]
    assert len(exp1) == 4
    assert len(exp3) == 10
    assert all(r["correctness_ok"] == "1" for r in rows)

    with (tmp_path / "summary.csv").open(newline="") as f:
        summary = list(csv.DictReader(f))
    assert len(summary) == 7
    assert all(float(r["correctness_ok_rate"]) == 1.0 for r in summary)

def test_plot_experiment_2(tmp_path):
    rows = []
    for size in (256, 512):
        row = exp.run_one(exp.generate_dataset("zipf64", size, 0)[1])
        row.exp_name = "exp2_size_scaling"
        row.dataset_name = "zipf64"
        rows.append(row)
    exp.plot_experiment_2(rows, tmp_path)
    assert (tmp_path / "exp2_time_zipf64.png").exists()
    assert (tmp_path / "exp2_compression_ratio_zipf64.png").exists()

def test_main_unknown_generator_fails(tmp_path, capsys):
    rc = exp.main(["--outdir", str(tmp_path), "--exp1_generators", "nope", "--no_exp2", "--no_exp3"])
    assert rc == 1
    assert "unknown generator" in capsys.readouterr().err

def test_main_file_mode(tmp_path):
    src = tmp_path / "in.txt"
    packed = tmp_path / "in.txt.huf"
    out = tmp_path / "out.txt"
    src.write_bytes(b"mississippi river\n" * 30)

    assert exp.main(["--compress", str(src), str(packed)]) == 0
    assert exp.main(["--decompress", str(packed), str(out)]) == 0
    assert out.read_bytes() == src.read_bytes()

def test_main_file_mode_reports_corrupt_input(tmp_path, capsys):
    packed = tmp_path / "bad.huf"
    packed.write_bytes(b"\xff\xff")
    assert exp.main(["--decompress", str(packed), str(tmp_path / "out")]) == 1
    assert "ERROR" in capsys.readouterr().err
