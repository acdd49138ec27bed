from __future__ import annotations

import sys
from importlib.resources import files
from pathlib import Path

_CONFIG_TEMPLATES = (
    "broker.yaml.example",
    "constructors/vhgold.yaml.example",
    "constructors/horizonte.yaml.example",
)
_DATA_TEMPLATES = (
    "sales.json.example",
    "pending_invoices.json.example",
)


def _upsert_env_var(env_file: Path, key: str, value: str) -> None:
    """Set or update a key=value pair in a .env file, creating it if needed.

    Uses dotenv.set_key for proper quoting (handles #, spaces, etc.).
    """
    from dotenv import set_key

    env_file.parent.mkdir(parents=True, exist_ok=True)
    if not env_file.exists():
        env_file.touch()
    set_key(str(env_file), key, value)


def _copy_templates(names: tuple[str, ...], dest_dir: Path) -> int:
    templates = files("corretor") / "templates"
    copied = 0
    for rel in names:
        dest = dest_dir / rel
        if dest.exists():
            print(f"  já existe: {dest}")
            continue
        dest.parent.mkdir(parents=True, exist_ok=True)
        src = templates / rel
        with src.open("rb") as f:
            dest.write_bytes(f.read())
        print(f"  criado: {dest}")
        copied += 1
    return copied


def _setup_session(config_dir: Path) -> bool:
    """Ask for the broker id and store it in the config dir .env. Returns True if saved."""
    print()
    print("Identificação do corretor")
    print("─────────────────────────")
    print()
    broker_id = input("ID do corretor (vazio para usar o broker.yaml): ").strip()
    if not broker_id:
        print("  Identificação pulada.")
        return False
    env_file = config_dir / ".env"
    _upsert_env_var(env_file, "CORRETOR_BROKER_ID", broker_id)
    constructor_id = input("ID da construtora (vazio se atende várias): ").strip()
    if constructor_id:
        _upsert_env_var(env_file, "CORRETOR_CONSTRUCTOR_ID", constructor_id)
    print(f"  Salvo em {env_file}")
    return True


def _init_config() -> None:
    """Copy bundled templates to the user's config/data directories."""
    from corretor.config import get_config_dir, get_data_dir

    config_dir = get_config_dir()
    data_dir = get_data_dir()

    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "constructors").mkdir(parents=True, exist_ok=True)
    data_dir.mkdir(parents=True, exist_ok=True)

    copied = _copy_templates(_CONFIG_TEMPLATES, config_dir)
    copied += _copy_templates(_DATA_TEMPLATES, data_dir)

    print()
    print(f"Configuração: {config_dir}")
    print(f"Dados:   {data_dir}")

    print()
    session_saved = False
    try:
        answer = input("Deseja informar seu ID de corretor agora? [S/n]: ").strip().lower()
        if answer in ("", "s", "sim", "y", "yes"):
            session_saved = _setup_session(config_dir)
    except (EOFError, KeyboardInterrupt):
        print()

    print()
    if copied:
        print("Próximos passos:")
        print(f"  1. cp {config_dir / 'broker.yaml.example'} {config_dir / 'broker.yaml'}")
        print("  2. Edite broker.yaml com seus dados (id, nome, CRECI)")
        print(f"  3. Renomeie os arquivos .example em {config_dir / 'constructors'} para .yaml")
        print(f"  4. Renomeie sales.json.example e pending_invoices.json.example em {data_dir}")
        if not session_saved:
            print("  5. Opcional: defina CORRETOR_BROKER_ID no .env")
        print("  Depois execute: painel-corretor")
    else:
        print("Nenhum arquivo novo criado (todos já existiam).")


def _preflight() -> bool:
    """Verify minimal config before launching the TUI.

    Auto-creates the data directory. Returns False with a helpful
    message when the config directory, broker.yaml or the broker id is missing.
    """
    from corretor.config import get_config_dir, get_data_dir, load_session

    data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)

    config_dir = get_config_dir()
    if not config_dir.is_dir():
        print(f"Erro: diretório de configuração não encontrado: {config_dir}")
        print("Execute 'painel-corretor init' para criar os arquivos de exemplo.")
        return False
    if not (config_dir / "broker.yaml").is_file():
        print(f"Erro: broker.yaml não encontrado em {config_dir}")
        print("Execute 'painel-corretor init' e configure o corretor.")
        return False
    try:
        load_session()
    except KeyError:
        print("Erro: ID do corretor não definido.")
        print("Informe 'id' no broker.yaml ou defina CORRETOR_BROKER_ID.")
        return False
    return True


def _print_summary() -> None:
    """Print the commission summary for the session broker."""
    from corretor.config import load_broker, load_session
    from corretor.models.broker import Broker
    from corretor.services.filters import for_session
    from corretor.services.reports import summarize
    from corretor.utils import store
    from corretor.utils.formatters import format_brl, format_percent

    session = load_session()
    broker = Broker.from_dict(load_broker())
    sales = for_session(store.load_sales(), session)
    invoices = store.load_pending_invoices()
    if session.constructor_id is not None:
        invoices = [i for i in invoices if i.constructor_id == session.constructor_id]
    summary = summarize(sales, invoices)

    print(f"{broker.nome} (CRECI {broker.creci})")
    print()
    print(f"  Vendas:            {summary.total_sales_count}")
    print(f"  Valor vendido:     {format_brl(summary.total_sales_value)}")
    print(f"  Total comissões:   {format_brl(summary.total_commissions)}")
    print(
        f"  Recebidas:         {format_brl(summary.paid_commissions)} "
        f"({format_percent(summary.paid_percentage)})"
    )
    print(
        f"  A receber:         {format_brl(summary.pending_commissions)} "
        f"({format_percent(summary.pending_percentage)})"
    )
    print(f"  Taxa média:        {format_percent(summary.average_commission_rate, 2)}")
    print(f"  Notas pendentes:   {summary.pending_invoice_count}")
    if summary.overdue_invoices_count:
        print(f"  Notas atrasadas:   {summary.overdue_invoices_count}")


def main() -> None:
    """Entry point for the Painel do Corretor CLI/TUI."""
    if len(sys.argv) > 1 and sys.argv[1] == "init":
        _init_config()
        return

    if not _preflight():
        sys.exit(1)

    if len(sys.argv) > 1 and sys.argv[1] == "resumo":
        _print_summary()
        return

    from corretor.tui.app import CorretorApp

    app = CorretorApp()
    app.run()


if __name__ == "__main__":
    main()
