"""
Directive parsing scenario script.

Feeds realistic assistant replies through MessageParser and prints the cleaned
transcript text next to the extracted charts, tables and actions, so the
output can be reviewed by eye after changing the prompt or the parser.

Usage:
    python -m tests.test_scenarios
"""

from pathlib import Path

from finassist.chat.parser import MessageParser
from finassist.models.schemas import ParsedMessage

SEPARATOR = "=" * 60
LOG_FILE = Path(__file__).parent / "results.log"

SCENARIOS = [
    {
        "name": "Spending analysis - pie chart",
        "reply": (
            "Analizando tus gastos del mes... Tu mayor gasto es en **Comida** con "
            "**$5,000** (27% de tus gastos).\n"
            '[CHART:PIE:{"title":"Gastos del mes","data":['
            '{"value":5000,"label":"Comida","color":"#FF6B6B"},'
            '{"value":3000,"label":"Transporte","color":"#4ECDC4"}]}]\n'
            "Te sugiero reducir gastos en comida rápida o delivery."
        ),
    },
    {
        "name": "Next payment - table",
        "reply": (
            "Tu próximo pago es el **15 de enero** con tu tarjeta BBVA Oro.\n"
            '[TABLE:{"headers":["Concepto","Fecha","Monto"],'
            '"rows":[["BBVA Tarjeta","15 Ene","$5,000"],["Netflix","5 Ene","$199"]]}]'
        ),
    },
    {
        "name": "Payment plan - bar chart, table and action",
        "reply": (
            "Te recomiendo la estrategia **Avalanche**:\n"
            '[CHART:BAR:{"title":"Pagos mensuales","data":['
            '{"value":5000,"label":"Enero","frontColor":"#7952FC"},'
            '{"value":4000,"label":"Febrero","frontColor":"#4ECDC4"}]}]\n'
            '[TABLE:{"headers":["Mes","Pago"],"rows":[["Enero","$5,000"],["Febrero","$4,000"]]}]\n'
            '[ACTION:SAVE_OBJECTIVE:{"title":"Pagar BBVA Oro","amount":15000,"type":"debt"}]'
        ),
    },
    # ── Adversarial replies ──────────────────────────────────────────
    {
        "name": "Braces and brackets inside cell values",
        "reply": (
            '[TABLE:{"headers":["Concepto","Monto"],'
            '"rows":[["Pago {adelantado}","${1,234}"],["Cargo ]extra[","$10]"]]}]'
        ),
    },
    {
        "name": "Truncated chart at end of reply",
        "reply": 'Aquí tienes el gráfico: [CHART:PIE:{"title":"X","data":[}',
    },
    {
        "name": "Valid table followed by invalid action JSON",
        "reply": (
            'Resumen:\n[TABLE:{"headers":["A"],"rows":[["1"]]}]\n'
            "[ACTION:SAVE_OBJECTIVE:{bad json}]\nFin."
        ),
    },
    {
        "name": "Lowercase subtype and unknown action",
        "reply": (
            '[CHART:line:{"title":"Saldo","data":[{"value":100,"label":"Ene"}]}]\n'
            '[ACTION:DELETE_ALL:{"title":"Nope"}]'
        ),
    },
]


def _metadata_summary(parsed: ParsedMessage) -> str:
    """Format a one-line summary of the extracted directives."""
    meta = parsed.metadata
    parts = [
        f"charts=[{', '.join(c.type for c in meta.charts)}]",
        f"tables={len(meta.tables)}",
        f"actions=[{', '.join(a.action_type for a in meta.action_buttons)}]",
    ]
    return "[" + ", ".join(parts) + "]"


def _print_and_log(text: str, file):
    """Print to stdout and write to log file."""
    print(text)
    file.write(text + "\n")


def run_scenario(parser: MessageParser, index: int, scenario: dict, log):
    _print_and_log(f"\n{SEPARATOR}", log)
    _print_and_log(f"SCENARIO {index}: {scenario['name']}", log)
    _print_and_log(SEPARATOR, log)

    parsed = parser.parse_message(scenario["reply"])

    _print_and_log(f"\n  Raw:     {scenario['reply']}", log)
    _print_and_log(f"\n  Cleaned: {parsed.content}", log)
    _print_and_log(f"\n  {_metadata_summary(parsed)}", log)
    _print_and_log(f"  valid={str(parser.validate_marker_json(scenario['reply'])).lower()}", log)


def main():
    parser = MessageParser()

    print(f"Log: {LOG_FILE}")

    with open(LOG_FILE, "w") as log:
        for i, scenario in enumerate(SCENARIOS, 1):
            run_scenario(parser, i, scenario, log)

        _print_and_log(f"\n{SEPARATOR}", log)
        _print_and_log("Done. Review results above or in tests/results.log", log)
        _print_and_log(SEPARATOR, log)


if __name__ == "__main__":
    main()
