import io
from decimal import Decimal
from typing import Dict, List

import pandas as pd
from fastapi.responses import StreamingResponse

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _cell(value):
    # openpyxl no escribe Decimal de forma nativa en todas las versiones
    if isinstance(value, Decimal):
        return float(value)
    if hasattr(value, "value"):
        return value.value
    return value


def build_workbook(sheets: Dict[str, List[dict]]) -> io.BytesIO:
    """Una hoja por clave; cada fila es un dict columna -> valor."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            df = pd.DataFrame([{k: _cell(v) for k, v in row.items()} for row in rows])
            df.to_excel(writer, index=False, sheet_name=name[:31])
    output.seek(0)
    return output


def excel_response(sheets: Dict[str, List[dict]], filename: str) -> StreamingResponse:
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(build_workbook(sheets), media_type=XLSX_MEDIA_TYPE, headers=headers)
