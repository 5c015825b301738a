from .catalog import Category, Supplier, Product
from .sales import SalesOrder, SalesOrderLine
from .purchasing import PurchaseOrder, PurchaseOrderLine
from .inventory import InventoryAdjustment, StockMovement
from .sequences import DocumentSequence

__all__ = [
    'Category', 'Supplier', 'Product',
    'SalesOrder', 'SalesOrderLine',
    'PurchaseOrder', 'PurchaseOrderLine',
    'InventoryAdjustment', 'StockMovement',
    'DocumentSequence',
]
