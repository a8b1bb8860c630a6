"""Aggregate rows produced by the reporting engine."""

from dataclasses import dataclass, field
from typing import List, Dict, Any


def margin_percent(profit: float, revenue: float) -> float:
    """Profit as a percentage of revenue, 0 when there is no revenue."""
    return (profit / revenue) * 100 if revenue > 0 else 0.0


@dataclass
class ProductSalesLine:
    """Per-product totals in the sales report."""

    product_id: str
    product_name: str
    category: str
    total_quantity: int = 0
    total_amount: float = 0.0

    def add(self, quantity: int, amount: float):
        self.total_quantity += quantity
        self.total_amount += amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "category": self.category,
            "totalQuantity": self.total_quantity,
            "totalAmount": self.total_amount
        }


@dataclass
class DailySalesLine:
    """Per-calendar-day totals in the sales report."""

    date: str
    total_amount: float = 0.0
    sales_count: int = 0

    def add(self, amount: float):
        self.total_amount += amount
        self.sales_count += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "totalAmount": self.total_amount,
            "salesCount": self.sales_count
        }


@dataclass
class SupplierDeliveryLine:
    """Per-supplier totals in the supplier-deliveries report."""

    supplier_id: str
    supplier_name: str
    delivery_count: int = 0
    total_amount: float = 0.0
    amount_paid: float = 0.0
    remaining_debt: float = 0.0

    def add(self, total_amount: float, amount_paid: float, remaining_debt: float):
        self.delivery_count += 1
        self.total_amount += total_amount
        self.amount_paid += amount_paid
        self.remaining_debt += remaining_debt

    def to_dict(self) -> Dict[str, Any]:
        return {
            "supplierId": self.supplier_id,
            "supplierName": self.supplier_name,
            "deliveryCount": self.delivery_count,
            "totalAmount": self.total_amount,
            "amountPaid": self.amount_paid,
            "remainingDebt": self.remaining_debt
        }


@dataclass
class ProductProfitLine:
    """Per-product profitability in the profit report.

    ``avg_cost`` is fixed when the line is created; every sale of the
    product in the same report is costed at that value.
    """

    product_id: str
    product_name: str
    avg_cost: float
    revenue: float = 0.0
    quantity_sold: int = 0
    cost: float = 0.0

    def add_sale(self, quantity: int, amount: float):
        self.revenue += amount
        self.quantity_sold += quantity
        self.cost += self.avg_cost * quantity

    @property
    def profit(self) -> float:
        return self.revenue - self.cost

    @property
    def profit_margin(self) -> float:
        return margin_percent(self.profit, self.revenue)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "revenue": self.revenue,
            "quantitySold": self.quantity_sold,
            "avgCost": self.avg_cost,
            "cost": self.cost,
            "profit": self.profit,
            "profitMargin": self.profit_margin
        }


@dataclass
class SupplierDebtLine:
    """Outstanding debt of one supplier with its unpaid deliveries."""

    supplier_id: str
    supplier_name: str
    total_debt: float = 0.0
    deliveries: List[Dict[str, Any]] = field(default_factory=list)

    def add_delivery(self, delivery: Dict[str, Any]):
        self.total_debt += delivery["remainingDebt"]
        self.deliveries.append(delivery)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "supplierId": self.supplier_id,
            "supplierName": self.supplier_name,
            "totalDebt": self.total_debt,
            "deliveries": self.deliveries
        }
