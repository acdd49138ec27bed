from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, RichLog, Static

from corretor.config import NFSE_PORTAL_URL, RATE_FLOOR
from corretor.utils.formatters import format_percent


class HelpScreen(ModalScreen):
    """Keyboard shortcuts and how commissions are computed."""

    BINDINGS = [
        Binding("escape", "go_back", "Voltar"),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Ajuda", id="header-bar")
                yield Button("\u2715", id="btn-modal-close")
            yield RichLog(id="help-content", wrap=True, markup=True)
            with Horizontal(classes="button-bar"):
                yield Button("\u2715 Fechar", id="btn-voltar")

    def on_mount(self) -> None:
        log = self.query_one("#help-content", RichLog)

        log.write("[bold]Painel do Corretor[/bold]")
        log.write("")
        log.write(
            "Acompanhe as comissões das suas vendas, as taxas negociadas com cada "
            "construtora e as notas fiscais que ainda precisam ser emitidas."
        )
        log.write("")

        log.write("[bold]Atalhos de teclado[/bold]")
        log.write("")
        log.write("  [bold cyan]u[/bold cyan]  Enviar nota        Anexar a NFS-e da venda")
        log.write("  [bold cyan]i[/bold cyan]  Notas pendentes    Notas a emitir e atrasadas")
        log.write("  [bold cyan]t[/bold cyan]  Taxas              Taxas por construtora")
        log.write("  [bold cyan]g[/bold cyan]  Relatórios         Totais por mês e construtora")
        log.write("  [bold cyan]f[/bold cyan]  Buscar             Focar no campo de busca")
        log.write("  [bold cyan]h[/bold cyan]  Ajuda              Esta tela")
        log.write("  [bold cyan]q[/bold cyan]  Sair               Encerrar aplicação")
        log.write("")
        log.write("[bold]Notas pendentes[/bold]")
        log.write("")
        log.write("  [bold cyan]e[/bold cyan]  Editar             Valor, taxa e vencimento")
        log.write("  [bold cyan]s[/bold cyan]  Enviar rascunho    Marcar o rascunho como pronto")
        log.write("  [bold cyan]u[/bold cyan]  Enviar nota        Anexar a NFS-e emitida")
        log.write("")
        log.write("[bold]Navegação na tabela[/bold]")
        log.write("")
        log.write("  [bold cyan]j / \u2193[/bold cyan]  Próxima linha")
        log.write("  [bold cyan]k / \u2191[/bold cyan]  Linha anterior")
        log.write("")

        log.write("[bold]Taxas de comissão[/bold]")
        log.write("")
        log.write(
            "A taxa aplicada segue a ordem: taxa especial para você neste empreendimento, "
            "taxa especial do empreendimento, taxa especial para você na construtora e, "
            "por fim, a taxa padrão da construtora. Sem taxa padrão cadastrada, vale "
            f"{format_percent(RATE_FLOOR)}."
        )
        log.write("")

        log.write("[bold yellow]Notas fiscais[/bold yellow]")
        log.write("")
        log.write(
            "As notas são emitidas fora deste painel, no Emissor Nacional da NFS-e "
            f"({NFSE_PORTAL_URL}). Aqui você apenas registra o número, a data, o valor "
            "e o PDF da nota emitida. Notas em atraso só aceitam o envio da nota."
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id in ("btn-voltar", "btn-modal-close"):
            self.app.pop_screen()

    def action_go_back(self) -> None:
        self.app.pop_screen()
