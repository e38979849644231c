"""Excel-Export der abgeglichenen Klassen und Kurse (openpyxl)."""

from pathlib import Path

from data.store import MemoryStore
from models.local import LocalClass

from export.helpers import COLORS, DAY_SHORT, build_week_grid, end_time, today_str


class ExcelExporter:
    """Exportiert den Bestand mit Übersicht und einem Wochenraster je Klasse."""

    COL_ZEIT_W = 12
    COL_DAY_W = 24

    ROW_HEADER_H = 22
    ROW_LESSON_H = 40

    def __init__(self, store: MemoryStore, title: str = "Schuljahres-Sync"):
        self.store = store
        self.title = title

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)
        for klass in sorted(self.store.data.classes, key=lambda c: c.name):
            self._sheet_klasse(wb, klass)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    @staticmethod
    def _sheet_title(name: str) -> str:
        # Excel: max. 31 Zeichen, keine []:*?/\
        for ch in "[]:*?/\\":
            name = name.replace(ch, "-")
        return name[:31]

    # ─── Sheet: Übersicht ─────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)

        ws.cell(row=1, column=1, value=self.title).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=f"Erstellt: {today_str()}")

        self._write_header(ws, 4, ["Klasse", "Kurs", "Tag", "Beginn", "Ende", "Raum"])
        border = self._thin_border()
        row = 5
        for klass in sorted(self.store.data.classes, key=lambda c: c.name):
            for course in sorted(self.store.courses_for_class(klass.id), key=lambda c: c.name):
                times = course.times or [None]
                for t in times:
                    values = [klass.name, course.name]
                    if t is None:
                        values += ["–", "", "", ""]
                    else:
                        values += [DAY_SHORT[t.weekday], t.start_time, end_time(t), t.room]
                    for col, v in enumerate(values, 1):
                        c = ws.cell(row=row, column=col, value=v)
                        c.border = border
                        if t is None:
                            c.fill = self._fill(COLORS["empty"])
                    row += 1

        for col, width in zip("ABCDEF", [10, 28, 6, 8, 8, 28]):
            ws.column_dimensions[col].width = width

    # ─── Sheet: Klasse ────────────────────────────────────────────────────────

    def _sheet_klasse(self, wb, klass: LocalClass) -> None:
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter

        ws = wb.create_sheet(title=self._sheet_title(f"Kl. {klass.name}"))
        courses = self.store.courses_for_class(klass.id)
        starts, days, grid = build_week_grid(courses, klass.name)

        self._write_header(ws, 1, ["Beginn"] + [DAY_SHORT[d] for d in days])
        ws.column_dimensions["A"].width = self.COL_ZEIT_W
        for i in range(len(days)):
            ws.column_dimensions[get_column_letter(i + 2)].width = self.COL_DAY_W

        border = self._thin_border()
        for r, start in enumerate(starts, 2):
            c = ws.cell(row=r, column=1, value=start)
            c.font = Font(bold=True, size=9)
            c.alignment = self._center_align(wrap=False)
            c.border = border
            for i, d in enumerate(days):
                here = grid.get((start, d), [])
                c = ws.cell(row=r, column=i + 2, value="\n".join(here))
                c.fill = self._fill(COLORS["lesson"] if here else COLORS["free"])
                c.alignment = self._center_align()
                c.border = border
                c.font = Font(size=8)
            ws.row_dimensions[r].height = self.ROW_LESSON_H
