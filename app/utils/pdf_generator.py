from fpdf import FPDF
from datetime import datetime
from decimal import Decimal

from app.config import settings


def _t(value) -> str:
    # Las fuentes core de FPDF solo aceptan latin-1
    return str("" if value is None else value).encode("latin-1", "replace").decode("latin-1")


def _m(value) -> str:
    return f"${Decimal(str(value or 0)):,.2f}"


class StorePDF(FPDF):
    def __init__(self, title: str = "", orientation: str = "P"):
        super().__init__(orientation=orientation)
        self.doc_title = title

    def header(self):
        self.set_font("helvetica", "B", 18)
        self.set_text_color(33, 37, 41)  # Dark Gray
        self.cell(0, 10, _t(settings.STORE_NAME.upper()), align="L")
        self.ln()

        self.set_font("helvetica", "", 10)
        self.set_text_color(108, 117, 125)  # Gray
        self.cell(0, 5, _t(settings.STORE_SLOGAN), align="L")
        self.ln()
        if self.doc_title:
            self.set_font("helvetica", "B", 12)
            self.set_text_color(0, 0, 0)
            self.cell(0, 8, _t(self.doc_title), align="L")
            self.ln()

        self.set_draw_color(200, 200, 200)
        self.line(10, self.get_y() + 2, self.w - 10, self.get_y() + 2)
        self.ln(6)

    def footer(self):
        self.set_y(-15)
        self.set_font("helvetica", "I", 8)
        self.set_text_color(128)
        self.cell(0, 10, _t(f"Página {self.page_no()}"), align="C")

    def table(self, columns, rows, widths=None, aligns=None):
        """Tabla simple: encabezado oscuro y filas cebra."""
        usable = self.w - 20
        widths = widths or [usable / len(columns)] * len(columns)
        aligns = aligns or ["L"] * len(columns)

        self.set_font("helvetica", "B", 8)
        self.set_fill_color(33, 37, 41)
        self.set_text_color(255, 255, 255)
        for col, w in zip(columns, widths):
            self.cell(w, 7, _t(col), align="C", fill=True)
        self.ln()

        self.set_text_color(0, 0, 0)
        self.set_font("helvetica", "", 8)
        fill = False
        for row in rows:
            if fill:
                self.set_fill_color(248, 249, 250)
            else:
                self.set_fill_color(255, 255, 255)
            for value, w, align in zip(row, widths, aligns):
                text = _t(value)
                max_chars = max(int(w / 1.8), 4)
                self.cell(w, 6, text[:max_chars], align=align, fill=True)
            self.ln()
            fill = not fill

    def key_values(self, pairs, label_width=60):
        for label, value in pairs:
            self.set_font("helvetica", "B", 10)
            self.cell(label_width, 6, _t(label))
            self.set_font("helvetica", "", 10)
            self.cell(0, 6, _t(value))
            self.ln()


def generate_account_statement_pdf(account: dict) -> bytes:
    """Estado de cuenta corriente: movimientos ascendentes con saldo acumulado."""
    client = account["client"]
    pdf = StorePDF("Estado de cuenta corriente")
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)

    pdf.key_values(
        [
            ("Cliente:", client.name),
            ("CUIT/DNI:", client.tax_id or "-"),
            ("Fecha:", datetime.now().strftime("%d/%m/%Y %H:%M")),
        ],
        label_width=30,
    )
    pdf.ln(4)

    rows = []
    for m in account["movements"]:
        is_charge = m["type"].value == "CHARGE"
        rows.append(
            [
                m["created_at"].strftime("%d/%m/%Y"),
                m["description"] or "",
                _m(m["amount"]) if is_charge else "",
                "" if is_charge else _m(m["amount"]),
                _m(m["running_balance"]),
            ]
        )
    pdf.table(
        ["FECHA", "CONCEPTO", "CARGO", "PAGO", "SALDO"],
        rows,
        widths=[25, 75, 30, 30, 30],
        aligns=["C", "L", "R", "R", "R"],
    )

    pdf.ln(4)
    pdf.set_font("helvetica", "B", 12)
    pdf.cell(160, 8, "SALDO ACTUAL", align="R")
    pdf.cell(30, 8, _m(account["balance"]), align="R")
    pdf.ln()
    return bytes(pdf.output())


def generate_cash_session_pdf(session, summary: dict) -> bytes:
    pdf = StorePDF(f"Sesión de caja #{session.id}")
    pdf.add_page()

    pdf.key_values(
        [
            ("Caja:", session.cash_register.name if session.cash_register else session.cash_register_id),
            ("Estado:", session.status.value),
            ("Apertura:", session.opened_at.strftime("%d/%m/%Y %H:%M") if session.opened_at else "-"),
            ("Cierre:", session.closed_at.strftime("%d/%m/%Y %H:%M") if session.closed_at else "-"),
            ("Fondo inicial:", _m(session.opening_amount)),
        ]
    )
    pdf.ln(4)

    methods = sorted(summary["sales"].keys())
    rows = [
        [method, _m(summary["sales"][method]), _m(summary["income"][method]), _m(summary["expenses"][method])]
        for method in methods
    ]
    rows.append(["TOTAL", _m(summary["sales_total"]), _m(summary["income_total"]), _m(summary["expenses_total"])])
    pdf.table(["MEDIO", "VENTAS", "INGRESOS", "EGRESOS"], rows, aligns=["L", "R", "R", "R"])
    pdf.ln(4)

    pairs = [("Efectivo teórico:", _m(summary["theoretical_cash"]))]
    if session.closing_amount is not None:
        pairs.append(("Efectivo contado:", _m(session.closing_amount)))
        pairs.append(("Diferencia:", _m(session.difference)))
    if session.counted_by:
        pairs.append(("Contado por:", session.counted_by))
    pdf.key_values(pairs)

    if session.counts:
        pdf.ln(4)
        pdf.table(
            ["DENOMINACIÓN", "CANTIDAD", "SUBTOTAL"],
            [
                [_m(c["denomination"]), c["quantity"], _m(Decimal(c["denomination"]) * int(c["quantity"]))]
                for c in session.counts
            ],
            aligns=["R", "C", "R"],
        )
    return bytes(pdf.output())


def generate_quotation_pdf(quotation) -> bytes:
    pdf = StorePDF()
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)

    # --- INFO HEADER ---
    pdf.set_font("helvetica", "B", 14)
    pdf.set_text_color(0, 0, 0)
    pdf.cell(100, 10, f"PRESUPUESTO #{quotation.id}", align="L")
    pdf.set_font("helvetica", "", 10)
    pdf.set_text_color(50, 50, 50)
    pdf.cell(90, 10, f"Fecha: {quotation.created_at.strftime('%d/%m/%Y %H:%M')}", align="R")
    pdf.ln()
    pdf.ln(3)

    # --- CLIENTE INFO ---
    client_name = quotation.client.name if quotation.client else "Consumidor Final"
    pdf.key_values(
        [
            ("Cliente:", client_name.upper()),
            ("CUIT/DNI:", quotation.client.tax_id if quotation.client and quotation.client.tax_id else "-"),
            ("Estado:", quotation.status.value),
        ],
        label_width=30,
    )
    pdf.ln(6)

    rows = []
    for line in quotation.items:
        product = line.product
        total = Decimal(str(line.price)) * Decimal(str(line.quantity)) - Decimal(str(line.discount or 0))
        rows.append(
            [
                product.sku if product else "",
                product.name if product else line.product_id,
                f"{Decimal(str(line.quantity)).normalize():f}",
                _m(line.price),
                _m(line.discount),
                _m(total),
            ]
        )
    pdf.table(
        ["SKU", "DESCRIPCIÓN", "CANT", "P. UNIT", "DESC.", "TOTAL"],
        rows,
        widths=[25, 75, 15, 25, 20, 30],
        aligns=["C", "L", "C", "R", "R", "R"],
    )

    # --- TOTALS ---
    pdf.ln(5)
    pdf.set_x(130)
    pdf.set_font("helvetica", "B", 12)
    pdf.set_fill_color(240, 240, 240)
    pdf.cell(30, 10, "TOTAL", align="R", fill=True)
    pdf.cell(40, 10, _m(quotation.total), align="R", fill=True)
    pdf.ln()

    # --- TERMS ---
    pdf.ln(15)
    pdf.set_font("helvetica", "B", 9)
    pdf.cell(0, 5, _t("Términos y Condiciones:"), align="L")
    pdf.ln()
    pdf.set_font("helvetica", "", 8)
    pdf.multi_cell(
        0,
        4,
        _t(
            "1. Precios sujetos a cambio sin previo aviso.\n"
            f"2. La vigencia de este presupuesto es de {quotation.valid_days} días.\n"
            "3. En pedidos especiales se requiere una seña del 50%."
        ),
    )
    return bytes(pdf.output())


def generate_report_pdf(title: str, columns, rows, summary=None) -> bytes:
    """PDF tabular genérico para los reportes exportables."""
    pdf = StorePDF(title, orientation="L" if len(columns) > 6 else "P")
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)
    if summary:
        pdf.key_values(summary)
        pdf.ln(3)
    pdf.table(columns, rows)
    return bytes(pdf.output())
