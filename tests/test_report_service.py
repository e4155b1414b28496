import unittest
from datetime import date

from stockledger.services.report_service import financial_metrics

TODAY = date(2024, 5, 15)


def _flow(entry_type, amount, day, category=None, payment_method=None):
    return {
        "type": entry_type,
        "amount": amount,
        "date": day,
        "category": category,
        "payment_method": payment_method,
    }


class FinancialMetricsTest(unittest.TestCase):
    def setUp(self):
        self.cash_flow = [
            _flow("income", 1000.0, date(2024, 5, 10), "Vendas", "pix"),
            _flow("expense", 400.0, date(2024, 5, 15), None, "boleto"),
            _flow("income", 500.0, date(2024, 4, 3), "Vendas", "pix"),
        ]
        self.payables = [
            {"supplier": "Tecidos Sul LTDA", "amount": 100.0, "due_date": date(2024, 5, 5), "status": "overdue"},
            {"supplier": None, "amount": 50.0, "due_date": date(2024, 5, 20), "status": "pending"},
            {"supplier": "ACME LTDA", "amount": 300.0, "due_date": date(2024, 5, 1), "status": "paid"},
        ]
        self.receivables = [
            {"customer": "João", "amount": 200.0, "due_date": date(2024, 5, 16), "status": "pending"},
            {"customer": "Ana", "amount": 80.0, "due_date": date(2024, 5, 2), "status": "received"},
        ]
        self.report = financial_metrics(self.payables, self.receivables, self.cash_flow, TODAY)

    def test_month_over_month(self):
        report = self.report
        self.assertEqual(report["current_income"], 1000.0)
        self.assertEqual(report["current_expense"], 400.0)
        self.assertEqual(report["last_income"], 500.0)
        self.assertEqual(report["last_expense"], 0)
        self.assertAlmostEqual(report["income_growth"], 100.0)
        self.assertEqual(report["expense_growth"], 0.0)
        self.assertAlmostEqual(report["profit_margin"], 60.0)

    def test_pending_and_overdue(self):
        report = self.report
        self.assertEqual(report["total_pending_payable"], 150.0)
        self.assertEqual(report["pending_payables_count"], 2)
        self.assertEqual(report["overdue_payables_count"], 1)
        self.assertEqual(report["total_pending_receivable"], 200.0)
        self.assertEqual(report["overdue_receivables_count"], 0)
        self.assertAlmostEqual(report["avg_overdue_days"], 10.0)

    def test_rankings_and_categories(self):
        report = self.report
        self.assertEqual(report["top_suppliers"], [{"name": "ACME LTDA", "amount": 300.0}])
        self.assertEqual(report["top_customers"], [{"name": "Ana", "amount": 80.0}])
        self.assertEqual(report["income_by_category"], [{"name": "Vendas", "value": 1000.0}])
        self.assertEqual(report["expense_by_category"], [{"name": "Outros", "value": 400.0}])
        self.assertEqual([row["name"] for row in report["payment_methods"]], ["pix", "boleto"])

    def test_weekly_starts_on_monday(self):
        weekly = self.report["weekly"]
        self.assertEqual(len(weekly), 7)
        self.assertEqual(weekly[0]["date"], date(2024, 5, 13))
        self.assertEqual(weekly[2]["expense"], 400.0)

    def test_monthly_trend_covers_twelve_months(self):
        trend = self.report["monthly_trend"]
        self.assertEqual(len(trend), 12)
        self.assertEqual(trend[0]["month"], "2023-06")
        self.assertEqual(trend[-1]["month"], "2024-05")
        self.assertEqual(trend[-1]["result"], 600.0)
        self.assertEqual(trend[-2]["income"], 500.0)

    def test_forecast_and_aging(self):
        forecast = self.report["forecast"]
        self.assertEqual(len(forecast), 30)
        self.assertEqual(forecast[0]["date"], TODAY)
        self.assertEqual(forecast[-1]["balance"], 750.0)

        aging = self.report["aging"]
        self.assertEqual(aging["current"], {"count": 1, "amount": 50.0})
        self.assertEqual(aging["1-30"], {"count": 1, "amount": 100.0})
        self.assertEqual(aging["60+"]["count"], 0)

    def test_empty_inputs(self):
        report = financial_metrics([], [], [], TODAY)
        self.assertEqual(report["profit_margin"], 0.0)
        self.assertEqual(report["avg_overdue_days"], 0.0)
        self.assertEqual(report["top_suppliers"], [])


if __name__ == "__main__":
    unittest.main()
