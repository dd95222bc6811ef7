import pytest

from prompt_validator.main import entrypoint


def _make_fake_run_impl(result=True):
	"""Return a (fake_run_impl, seen_dict) pair for monkeypatching."""
	seen = {}

	def fake_run_impl(
	    prompt_files,
	    run_timeout=None,
	    stabilize_timeout=None,
	    marker_timeout=None,
	    judge_timeout=None,
	    judge=None,
	    show_invocations=None,
	):
		seen["prompt_files"] = prompt_files
		seen["run_timeout"] = run_timeout
		seen["stabilize_timeout"] = stabilize_timeout
		seen["marker_timeout"] = marker_timeout
		seen["judge_timeout"] = judge_timeout
		seen["judge"] = judge
		seen["show_invocations"] = show_invocations
		return result

	return fake_run_impl, seen


@pytest.fixture
def suite(tmp_path):
	path = tmp_path / "smoke.yaml"
	path.write_text("- hello\n")
	return path


def test_cli_entrypoint_defaults_to_run(monkeypatch, suite):
	fake_run_impl, seen = _make_fake_run_impl()
	monkeypatch.setattr("prompt_validator.main.run_impl", fake_run_impl)
	entrypoint(
	    [
	        str(suite),
	        "--run-timeout",
	        "300",
	        "--stabilize-timeout",
	        "45",
	        "--marker-timeout",
	        "10",
	        "--judge-timeout",
	        "20",
	        "--no-judge",
	    ],
	    standalone_mode=False,
	)
	assert seen["prompt_files"] == [suite]
	assert seen["run_timeout"] == 300
	assert seen["stabilize_timeout"] == 45
	assert seen["marker_timeout"] == 10
	assert seen["judge_timeout"] == 20
	assert seen["judge"] is False
	assert seen["show_invocations"] is None


def test_cli_entrypoint_strips_run_prefix(monkeypatch, suite):
	fake_run_impl, seen = _make_fake_run_impl()
	monkeypatch.setattr("prompt_validator.main.run_impl", fake_run_impl)
	entrypoint(["run", str(suite), "--show-invocations"],
	           standalone_mode=False)
	assert seen["prompt_files"] == [suite]
	assert seen["show_invocations"] is True
	assert seen["judge"] is None


def test_cli_accepts_several_files(monkeypatch, tmp_path):
	files = []
	for name in ("a.yaml", "b.json"):
		path = tmp_path / name
		path.write_text("[]")
		files.append(path)
	fake_run_impl, seen = _make_fake_run_impl()
	monkeypatch.setattr("prompt_validator.main.run_impl", fake_run_impl)
	entrypoint([str(f) for f in files], standalone_mode=False)
	assert seen["prompt_files"] == files


def test_cli_exits_nonzero_on_failed_prompts(monkeypatch, suite):
	fake_run_impl, _ = _make_fake_run_impl(result=False)
	monkeypatch.setattr("prompt_validator.main.run_impl", fake_run_impl)
	assert entrypoint([str(suite)], standalone_mode=False) == 1


def test_cli_missing_file_is_rejected(tmp_path):
	with pytest.raises(SystemExit) as exc_info:
		entrypoint([str(tmp_path / "missing.yaml")])
	assert exc_info.value.code != 0


def test_cli_entrypoint_help_does_not_crash():
	with pytest.raises(SystemExit) as exc_info:
		entrypoint(["--help"], standalone_mode=True)
	assert exc_info.value.code == 0
