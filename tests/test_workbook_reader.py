from __future__ import annotations

import io
import unittest
from datetime import datetime

from openpyxl import Workbook

from app.mappers.country_mapper import CountryMapper
from app.parsers.policy_parser import PolicyLedgerParser
from app.parsers.workbook_reader import WorkbookReadError, read_policy_rows, read_shipment_sheets


def _xlsx_bytes(sheets: dict[str, list[list[object]]]) -> bytes:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        worksheet = workbook.create_sheet(title=name)
        for row in rows:
            worksheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestReadPolicyRows(unittest.TestCase):
    def test_reads_first_sheet_as_header_keyed_rows(self) -> None:
        content = _xlsx_bytes(
            {
                "Policies": [
                    [" Certificate Number ", "Status", "Total Premium USD"],
                    ["C-1", "Booked", 120],
                    ["C-2", None, 80],
                ],
                "Other": [["ignored"]],
            }
        )

        rows = read_policy_rows(content, filename="ledger.xlsx")

        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0]["Certificate Number"], "C-1")
        self.assertEqual(rows[0]["Status"], "Booked")
        self.assertIsNone(rows[1]["Status"])

    def test_reads_csv_with_bom(self) -> None:
        content = "\ufeffCertificate Number,Status\nC-1,Booked\nC-2,\n".encode("utf-8")

        rows = read_policy_rows(content, filename="ledger.csv")

        self.assertEqual([row["Certificate Number"] for row in rows], ["C-1", "C-2"])
        self.assertIsNone(rows[1]["Status"])

    def test_numeric_identifiers_keep_their_source_text(self) -> None:
        content = (
            "Certificate Number,Date Booked,Total Premium USD,Primary Assured Country\n"
            "1001,45000,120,Germany\n"
            ",2024-01-15,80.5,France\n"
        ).encode("utf-8")

        rows = read_policy_rows(content, filename="ledger.csv")
        records = PolicyLedgerParser(CountryMapper()).parse_rows(rows).records

        self.assertEqual([record.certificate_number for record in records], ["1001", None])
        self.assertEqual(records[0].date_booked, datetime(2023, 3, 15))
        self.assertEqual([record.total_premium_usd for record in records], [120, 81])

    def test_workbook_identifiers_are_not_widened_to_floats(self) -> None:
        content = _xlsx_bytes(
            {
                "Policies": [
                    ["Certificate Number", "Total Premium USD"],
                    [1001, 120],
                    [None, 80],
                ]
            }
        )

        rows = read_policy_rows(content, filename="ledger.xlsx")
        records = PolicyLedgerParser(CountryMapper()).parse_rows(rows).records

        self.assertEqual(rows[0]["Certificate Number"], 1001)
        self.assertIsNone(rows[1]["Certificate Number"])
        self.assertEqual([record.certificate_number for record in records], ["1001", None])

    def test_empty_upload_raises(self) -> None:
        with self.assertRaises(WorkbookReadError) as ctx:
            read_policy_rows(b"", filename="ledger.xlsx")
        self.assertEqual(ctx.exception.to_dict()["filename"], "ledger.xlsx")

    def test_legacy_xls_is_rejected(self) -> None:
        with self.assertRaises(WorkbookReadError):
            read_policy_rows(b"not really", filename="ledger.xls")

    def test_corrupt_workbook_raises(self) -> None:
        with self.assertRaises(WorkbookReadError):
            read_policy_rows(b"definitely not a zip archive", filename="ledger.xlsx")


class TestReadShipmentSheets(unittest.TestCase):
    def test_every_sheet_becomes_a_headerless_grid(self) -> None:
        content = _xlsx_bytes(
            {
                "Seafreight excl. APEX": [
                    ["Report", None, None],
                    [None, "Sea Logistics", "Germany"],
                ],
                "Summary": [["Total", 5]],
            }
        )

        sheets = read_shipment_sheets(content, filename="volumes.xlsx")

        self.assertEqual(set(sheets), {"Seafreight excl. APEX", "Summary"})
        grid = sheets["Seafreight excl. APEX"]
        self.assertEqual(grid[0][0], "Report")
        self.assertIsNone(grid[1][0])
        self.assertEqual(grid[1][1], "Sea Logistics")
        self.assertEqual(sheets["Summary"][0][1], 5)

    def test_csv_is_not_a_shipment_workbook(self) -> None:
        with self.assertRaises(WorkbookReadError):
            read_shipment_sheets(b"a,b\n1,2\n", filename="volumes.csv")


if __name__ == "__main__":
    unittest.main()
