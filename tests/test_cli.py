from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import yaml

from corretor.cli import _init_config, _preflight, _print_summary, _upsert_env_var, main


class TestMain:
    @patch("corretor.tui.app.CorretorApp")
    @patch("corretor.cli._preflight", return_value=True)
    def test_launches_tui(self, mock_preflight, mock_app_cls):
        mock_app = MagicMock()
        mock_app_cls.return_value = mock_app
        with patch("sys.argv", ["painel-corretor"]):
            main()
        mock_preflight.assert_called_once()
        mock_app_cls.assert_called_once()
        mock_app.run.assert_called_once()

    @patch("corretor.cli._init_config")
    def test_init_dispatches(self, mock_init):
        with patch("sys.argv", ["painel-corretor", "init"]):
            main()
        mock_init.assert_called_once()

    @patch("corretor.cli._print_summary")
    @patch("corretor.cli._preflight", return_value=True)
    def test_resumo_dispatches(self, mock_preflight, mock_summary):
        with (
            patch("sys.argv", ["painel-corretor", "resumo"]),
            patch("corretor.tui.app.CorretorApp") as mock_app_cls,
        ):
            main()
        mock_summary.assert_called_once()
        mock_app_cls.assert_not_called()

    @patch("corretor.cli._preflight", return_value=False)
    def test_exit_1_on_failure(self, mock_preflight):
        with patch("sys.argv", ["painel-corretor"]), pytest.raises(SystemExit, match="1"):
            main()


class TestPreflight:
    def test_preflight_ok(self, monkeypatch, tmp_path):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "broker.yaml").write_text(yaml.dump({"id": "broker-1", "nome": "Ana"}))
        data_dir = tmp_path / "data"
        monkeypatch.delenv("CORRETOR_BROKER_ID", raising=False)
        monkeypatch.delenv("CORRETOR_CONSTRUCTOR_ID", raising=False)
        monkeypatch.setattr("corretor.config.get_config_dir", lambda: config_dir)
        monkeypatch.setattr("corretor.config.get_data_dir", lambda: data_dir)
        assert _preflight() is True
        assert data_dir.is_dir()

    def test_preflight_no_config(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setattr("corretor.config.get_config_dir", lambda: tmp_path / "missing")
        monkeypatch.setattr("corretor.config.get_data_dir", lambda: tmp_path / "data")
        assert _preflight() is False
        assert "painel-corretor init" in capsys.readouterr().out

    def test_preflight_no_broker(self, monkeypatch, tmp_path, capsys):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        monkeypatch.setattr("corretor.config.get_config_dir", lambda: config_dir)
        monkeypatch.setattr("corretor.config.get_data_dir", lambda: tmp_path / "data")
        assert _preflight() is False
        assert "broker.yaml" in capsys.readouterr().out

    def test_preflight_no_broker_id(self, monkeypatch, tmp_path, capsys):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "broker.yaml").write_text(yaml.dump({"nome": "Ana"}))
        monkeypatch.delenv("CORRETOR_BROKER_ID", raising=False)
        monkeypatch.delenv("CORRETOR_CONSTRUCTOR_ID", raising=False)
        monkeypatch.setattr("corretor.config.get_config_dir", lambda: config_dir)
        monkeypatch.setattr("corretor.config.get_data_dir", lambda: tmp_path / "data")
        assert _preflight() is False
        assert "CORRETOR_BROKER_ID" in capsys.readouterr().out


class TestInitConfig:
    def _dirs(self, monkeypatch, tmp_path):
        config_dir = tmp_path / "config"
        data_dir = tmp_path / "data"
        monkeypatch.setattr("corretor.config.get_config_dir", lambda: config_dir)
        monkeypatch.setattr("corretor.config.get_data_dir", lambda: data_dir)
        return config_dir, data_dir

    def test_copies_templates(self, monkeypatch, tmp_path):
        config_dir, data_dir = self._dirs(monkeypatch, tmp_path)
        monkeypatch.setattr("builtins.input", lambda _: "n")
        _init_config()
        assert (config_dir / "broker.yaml.example").exists()
        assert (config_dir / "constructors" / "vhgold.yaml.example").exists()
        assert (config_dir / "constructors" / "horizonte.yaml.example").exists()
        assert (data_dir / "sales.json.example").exists()
        assert (data_dir / "pending_invoices.json.example").exists()

    def test_skips_existing(self, monkeypatch, tmp_path, capsys):
        config_dir, _ = self._dirs(monkeypatch, tmp_path)
        config_dir.mkdir(parents=True)
        (config_dir / "broker.yaml.example").write_text("existing")
        monkeypatch.setattr("builtins.input", lambda _: "n")
        _init_config()
        assert (config_dir / "broker.yaml.example").read_text() == "existing"
        assert "já existe" in capsys.readouterr().out

    def test_broker_step_shown(self, monkeypatch, tmp_path, capsys):
        self._dirs(monkeypatch, tmp_path)
        monkeypatch.setattr("builtins.input", lambda _: "n")
        _init_config()
        assert "CORRETOR_BROKER_ID" in capsys.readouterr().out

    def test_session_saved(self, monkeypatch, tmp_path, capsys):
        config_dir, _ = self._dirs(monkeypatch, tmp_path)
        answers = iter(["s", "broker-7", "VHGold-123"])
        monkeypatch.setattr("builtins.input", lambda _: next(answers))
        _init_config()
        content = (config_dir / ".env").read_text()
        assert "CORRETOR_BROKER_ID='broker-7'" in content
        assert "CORRETOR_CONSTRUCTOR_ID='VHGold-123'" in content
        assert "CORRETOR_BROKER_ID no .env" not in capsys.readouterr().out

    def test_blank_broker_skips_session(self, monkeypatch, tmp_path):
        config_dir, _ = self._dirs(monkeypatch, tmp_path)
        answers = iter(["", ""])
        monkeypatch.setattr("builtins.input", lambda _: next(answers))
        _init_config()
        assert not (config_dir / ".env").exists()

    def test_eof_during_prompt(self, monkeypatch, tmp_path, capsys):
        self._dirs(monkeypatch, tmp_path)
        monkeypatch.setattr("builtins.input", MagicMock(side_effect=EOFError))
        _init_config()
        assert "Configuração:" in capsys.readouterr().out


class TestUpsertEnvVar:
    def test_creates_new_file(self, tmp_path):
        env_file = tmp_path / "sub" / ".env"
        _upsert_env_var(env_file, "KEY", "value")
        content = env_file.read_text()
        assert "KEY=" in content
        assert "value" in content

    def test_updates_existing_key(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MY_KEY='old'\nOTHER='keep'\n")
        _upsert_env_var(env_file, "MY_KEY", "new")
        content = env_file.read_text()
        assert "new" in content
        assert "'old'" not in content
        assert "OTHER=" in content


class TestPrintSummary:
    def test_all_constructors(self, corretor_env, capsys):
        _print_summary()
        out = capsys.readouterr().out
        assert "Ana Paula Ribeiro (CRECI 123456-F)" in out
        assert "Vendas:            5" in out
        assert "R$ 10.600,00" in out
        assert "R$ 4.000,00" in out
        assert "R$ 6.600,00" in out

    def test_scoped_to_constructor(self, corretor_env, monkeypatch, capsys):
        monkeypatch.setenv("CORRETOR_CONSTRUCTOR_ID", "Horizonte-456")
        _print_summary()
        out = capsys.readouterr().out
        assert "Vendas:            2" in out
        assert "R$ 5.800,00" in out
        assert "Notas pendentes:   1" in out
