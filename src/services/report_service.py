"""Read-only reports over the ledgers and registries.

Every date-ranged report takes ``YYYY-MM-DD`` bounds; the start is inclusive
from midnight and the end is inclusive up to 23:59:59.999. Ledger rows whose
referenced product or supplier no longer exists are treated as tombstones:
they are left out of the aggregates and counted in ``excludedCount``.
"""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.product import Product
from ..models.reports import (
    DailySalesLine,
    ProductProfitLine,
    ProductSalesLine,
    SupplierDebtLine,
    SupplierDeliveryLine,
    margin_percent,
)
from ..models.stock_in import PaymentStatus, StockIn
from ..models.stock_out import StockOut
from ..models.supplier import Supplier
from ..store.database import Database, get_database
from ..utils.dates import DateRange, day_key, isoformat, parse_date_range
from ..utils.exceptions import BaseAppException, ReportGenerationError
from ..utils.logger import get_error_logger, get_report_logger

UNKNOWN_PRODUCT = "Unknown Product"


class ReportService:
    """Sales, stock, supplier, profit and debt reports."""

    def __init__(self, database: Optional[Database] = None):
        self.logger = get_report_logger()
        self.error_logger = get_error_logger()
        self.db = database or get_database()

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def sales_report(self, start_date: Optional[str], end_date: Optional[str]) -> Dict[str, Any]:
        """
        Revenue in a date range, grouped by product and by day.

        Returns:
            totalSales, totalRevenue, productSales, dailySales (ascending by
            date), excludedCount and the included rows (newest first)
        """
        date_range = parse_date_range(start_date, end_date)

        with self.db.session_scope() as session:
            sales = self._sales_in_range(session, date_range)
            valid_sales = [sale for sale in sales if sale.product is not None]

            product_sales: Dict[str, ProductSalesLine] = {}
            daily_sales: Dict[str, DailySalesLine] = {}

            for sale in valid_sales:
                line = product_sales.get(sale.product_id)
                if line is None:
                    line = product_sales[sale.product_id] = ProductSalesLine(
                        product_id=sale.product_id,
                        product_name=sale.product.name,
                        category=sale.product.category
                    )
                line.add(sale.quantity, sale.total_amount)

                key = day_key(sale.sale_date)
                daily_sales.setdefault(key, DailySalesLine(date=key)).add(sale.total_amount)

            excluded = len(sales) - len(valid_sales)
            total_revenue = sum(sale.total_amount for sale in valid_sales)

            self.logger.info(
                f"Sales report {date_range.start.date()}..{date_range.end.date()}: "
                f"{len(valid_sales)} sales, revenue {total_revenue}, {excluded} excluded"
            )

            return {
                "totalSales": len(valid_sales),
                "totalRevenue": total_revenue,
                "productSales": [line.to_dict() for line in product_sales.values()],
                "dailySales": [daily_sales[key].to_dict() for key in sorted(daily_sales)],
                "excludedCount": excluded,
                "data": [sale.to_dict() for sale in valid_sales]
            }

    # ------------------------------------------------------------------
    # Stock status
    # ------------------------------------------------------------------

    def stock_status_report(self) -> Dict[str, Any]:
        """
        Current stock of every product, grouped by category.

        Negative stock is reported as-is: the product counts as out of stock
        and is also listed under ``anomalies``.
        """
        with self.db.session_scope() as session:
            products = session.scalars(select(Product).order_by(Product.category, Product.name)).all()

            categorized: Dict[str, List[Dict[str, Any]]] = {}
            for product in products:
                categorized.setdefault(product.category, []).append(product.to_dict())

            out_of_stock = [p for p in products if p.current_stock <= 0]
            low_stock = [p for p in products if 0 < p.current_stock < p.min_stock_level]
            healthy = [p for p in products if p.current_stock >= p.min_stock_level and p.current_stock > 0]
            negative = [p for p in products if p.has_negative_stock]

            if negative:
                self.logger.warning(
                    f"{len(negative)} product(s) with negative stock: "
                    + ", ".join(f"{p.name}={p.current_stock}" for p in negative)
                )

            return {
                "totalProducts": len(products),
                "outOfStockCount": len(out_of_stock),
                "lowStockCount": len(low_stock),
                "healthyStockCount": len(healthy),
                "negativeStockCount": len(negative),
                "anomalies": [p.to_dict() for p in negative],
                "categorizedProducts": categorized,
                "data": [p.to_dict() for p in products]
            }

    # ------------------------------------------------------------------
    # Supplier deliveries
    # ------------------------------------------------------------------

    def supplier_deliveries_report(
        self,
        start_date: Optional[str],
        end_date: Optional[str],
        supplier_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Deliveries in a date range with amount, paid and debt totals per supplier."""
        date_range = parse_date_range(start_date, end_date)

        with self.db.session_scope() as session:
            stmt = (
                select(StockIn)
                .where(StockIn.delivery_date.between(date_range.start, date_range.end))
                .order_by(StockIn.delivery_date.desc())
            )
            if supplier_id:
                stmt = stmt.where(StockIn.supplier_id == supplier_id)

            deliveries = session.scalars(stmt).all()
            valid = [d for d in deliveries if d.supplier is not None]

            per_supplier: Dict[str, SupplierDeliveryLine] = {}
            for delivery in valid:
                line = per_supplier.get(delivery.supplier_id)
                if line is None:
                    line = per_supplier[delivery.supplier_id] = SupplierDeliveryLine(
                        supplier_id=delivery.supplier_id,
                        supplier_name=delivery.supplier.name
                    )
                line.add(delivery.total_amount, delivery.amount_paid, delivery.remaining_debt)

            self.logger.info(
                f"Supplier deliveries report {date_range.start.date()}..{date_range.end.date()}: "
                f"{len(valid)} deliveries"
            )

            return {
                "totalDeliveries": len(valid),
                "totalAmount": sum(d.total_amount for d in valid),
                "totalPaid": sum(d.amount_paid for d in valid),
                "totalDebt": sum(d.remaining_debt for d in valid),
                "supplierDeliveries": [line.to_dict() for line in per_supplier.values()],
                "excludedCount": len(deliveries) - len(valid),
                "data": [d.to_dict() for d in valid]
            }

    # ------------------------------------------------------------------
    # Profit
    # ------------------------------------------------------------------

    def profit_report(self, start_date: Optional[str], end_date: Optional[str]) -> Dict[str, Any]:
        """
        Revenue, cost of goods sold and gross profit for a date range.

        A product's unit cost is the plain mean of the unit prices of all its
        deliveries, whatever their date. It is looked up once per product and
        reused for every sale line of that product in this report.
        """
        date_range = parse_date_range(start_date, end_date)

        with self.db.session_scope() as session:
            sales = self._sales_in_range(session, date_range)
            valid_sales = [sale for sale in sales if sale.product is not None]

            avg_costs = self._average_costs(session, {sale.product_id for sale in valid_sales})

            lines: Dict[str, ProductProfitLine] = {}
            for sale in valid_sales:
                line = lines.get(sale.product_id)
                if line is None:
                    line = lines[sale.product_id] = ProductProfitLine(
                        product_id=sale.product_id,
                        product_name=sale.product.name,
                        avg_cost=avg_costs.get(sale.product_id, 0.0)
                    )
                line.add_sale(sale.quantity, sale.total_amount)

            total_revenue = sum(sale.total_amount for sale in valid_sales)
            cost_of_goods_sold = sum(line.cost for line in lines.values())
            gross_profit = total_revenue - cost_of_goods_sold

            profitability = sorted(lines.values(), key=lambda line: line.profit, reverse=True)

            self.logger.info(
                f"Profit report {date_range.start.date()}..{date_range.end.date()}: "
                f"revenue {total_revenue}, COGS {cost_of_goods_sold}, profit {gross_profit}"
            )

            return {
                "period": date_range.to_dict(),
                "totalRevenue": total_revenue,
                "costOfGoodsSold": cost_of_goods_sold,
                "grossProfit": gross_profit,
                "profitMargin": margin_percent(gross_profit, total_revenue),
                "productProfitability": [line.to_dict() for line in profitability],
                "salesCount": len(valid_sales),
                "excludedCount": len(sales) - len(valid_sales)
            }

    # ------------------------------------------------------------------
    # Outstanding debts
    # ------------------------------------------------------------------

    def outstanding_debts_report(self) -> Dict[str, Any]:
        """Suppliers still owed money and the deliveries that make up the debt."""
        with self.db.session_scope() as session:
            suppliers = session.scalars(
                select(Supplier)
                .where(Supplier.total_debt > 0)
                .order_by(Supplier.total_debt.desc())
            ).all()

            unpaid = session.scalars(
                select(StockIn)
                .where(
                    StockIn.payment_status != PaymentStatus.PAID.value,
                    StockIn.remaining_debt > 0
                )
                .order_by(StockIn.delivery_date.desc())
            ).all()

            valid = [delivery for delivery in unpaid if delivery.supplier is not None]

            supplier_debts: Dict[str, SupplierDebtLine] = {}
            for delivery in valid:
                line = supplier_debts.get(delivery.supplier_id)
                if line is None:
                    line = supplier_debts[delivery.supplier_id] = SupplierDebtLine(
                        supplier_id=delivery.supplier_id,
                        supplier_name=delivery.supplier.name
                    )
                line.add_delivery({
                    "id": delivery.id,
                    "productName": delivery.product.name if delivery.product else UNKNOWN_PRODUCT,
                    "deliveryDate": isoformat(delivery.delivery_date),
                    "totalAmount": delivery.total_amount,
                    "amountPaid": delivery.amount_paid,
                    "remainingDebt": delivery.remaining_debt
                })

            total_debt = sum(supplier.total_debt for supplier in suppliers)
            self.logger.info(
                f"Outstanding debts report: {len(suppliers)} supplier(s), total debt {total_debt}"
            )

            return {
                "totalDebt": total_debt,
                "suppliersWithDebtCount": len(suppliers),
                "suppliers": [supplier.to_dict() for supplier in suppliers],
                "supplierDebts": [line.to_dict() for line in supplier_debts.values()],
                "unpaidDeliveries": [delivery.to_dict() for delivery in valid],
                "excludedCount": len(unpaid) - len(valid)
            }

    # ------------------------------------------------------------------
    # Product sales
    # ------------------------------------------------------------------

    def product_sales_report(self, start_date: Optional[str], end_date: Optional[str]) -> Dict[str, Any]:
        """
        Units sold and revenue of every product in a date range.

        Raises:
            ValidationError: Missing or malformed dates
            ReportGenerationError: Any other failure, with a message that does
                not expose internals
        """
        date_range = parse_date_range(start_date, end_date)

        try:
            return self._product_sales(date_range)
        except BaseAppException:
            raise
        except Exception as e:
            self.error_logger.error(f"Error in product sales report: {str(e)}", exc_info=True)
            raise ReportGenerationError("Error generating product sales report") from e

    def _product_sales(self, date_range: DateRange) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            products = session.scalars(select(Product).order_by(Product.name)).all()

            sold = {
                row.product_id: row
                for row in session.execute(
                    select(
                        StockOut.product_id,
                        func.sum(StockOut.quantity).label("quantity"),
                        func.sum(StockOut.total_amount).label("revenue")
                    )
                    .where(StockOut.sale_date.between(date_range.start, date_range.end))
                    .group_by(StockOut.product_id)
                )
            }

            rows = []
            for product in products:
                totals = sold.get(product.id)
                quantity_sold = int(totals.quantity) if totals else 0
                revenue = float(totals.revenue) if totals else 0.0
                rows.append({
                    "id": product.id,
                    "productName": product.name,
                    "category": product.category,
                    "quantitySold": quantity_sold,
                    "currentStock": product.current_stock,
                    "totalRevenue": revenue,
                    "averagePrice": revenue / quantity_sold if quantity_sold > 0 else 0.0
                })

            excluded = session.scalar(
                select(func.count())
                .select_from(StockOut)
                .where(
                    StockOut.sale_date.between(date_range.start, date_range.end),
                    StockOut.product_id.not_in(select(Product.id))
                )
            ) or 0

            total_sold = sum(row["quantitySold"] for row in rows)
            total_revenue = sum(row["totalRevenue"] for row in rows)

            self.logger.info(
                f"Product sales report {date_range.start.date()}..{date_range.end.date()}: "
                f"{total_sold} units, revenue {total_revenue}"
            )

            return {
                "products": rows,
                "totalProducts": len(products),
                "totalProductsSold": total_sold,
                "totalRevenue": total_revenue,
                "averageSalePrice": total_revenue / total_sold if total_sold > 0 else 0.0,
                "excludedCount": excluded
            }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _sales_in_range(session: Session, date_range: DateRange) -> List[StockOut]:
        return session.scalars(
            select(StockOut)
            .where(StockOut.sale_date.between(date_range.start, date_range.end))
            .order_by(StockOut.sale_date.desc())
        ).all()

    @staticmethod
    def _average_costs(session: Session, product_ids: Iterable[str]) -> Dict[str, float]:
        """Mean delivery unit price per product, over all deliveries regardless of date."""
        product_ids = list(product_ids)
        if not product_ids:
            return {}

        rows = session.execute(
            select(StockIn.product_id, func.avg(StockIn.unit_price))
            .where(StockIn.product_id.in_(product_ids))
            .group_by(StockIn.product_id)
        )
        return {product_id: float(avg_cost) for product_id, avg_cost in rows}
