"""
app/parsers package marker.
"""

from app.parsers.policy_parser import PolicyLedgerParser, parse_policy_rows
from app.parsers.shipment_parser import ShipmentWorkbookParser, TimeColumn, parse_shipment_workbook
from app.parsers.workbook_reader import WorkbookReadError, read_policy_rows, read_shipment_sheets

__all__ = [
    "PolicyLedgerParser",
    "ShipmentWorkbookParser",
    "TimeColumn",
    "WorkbookReadError",
    "parse_policy_rows",
    "parse_shipment_workbook",
    "read_policy_rows",
    "read_shipment_sheets",
]
