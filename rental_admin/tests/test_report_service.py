import unittest
from datetime import date

from support import add_cliente, add_materiale, add_ordine, make_session_factory

from services.report_service import get_material_order_counts, get_monthly_profits, month_key, month_label


class MonthlyProfitsTests(unittest.TestCase):
    def setUp(self):
        self.engine, self.SessionLocal = make_session_factory()
        self.db = self.SessionLocal()
        self.cliente = add_cliente(self.db)
        self.gazebo = add_materiale(self.db, nome="Gazebo")

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_only_paid_orders_count(self):
        add_ordine(self.db, self.cliente, self.gazebo, data_consegna=date(2026, 5, 3), totale=100, pagato=True)
        add_ordine(self.db, self.cliente, self.gazebo, data_consegna=date(2026, 5, 20), totale=50)

        rows = get_monthly_profits(self.db)

        self.assertEqual(rows, [{"anno_mese": "2026-05", "mese": "Maggio", "totale_pagato": 100}])

    def test_months_without_payments_still_listed_in_order(self):
        add_ordine(self.db, self.cliente, self.gazebo, data_consegna=date(2026, 2, 1), totale=30)
        add_ordine(self.db, self.cliente, self.gazebo, data_consegna=date(2025, 12, 24), totale=80, pagato=True)
        add_ordine(self.db, self.cliente, self.gazebo, data_consegna=date(2026, 1, 6), totale=20, pagato=True)
        add_ordine(self.db, self.cliente, self.gazebo, data_consegna=date(2026, 1, 9), totale=5, pagato=True)
        add_ordine(self.db, self.cliente, self.gazebo, data_consegna=None, totale=999, pagato=True)

        rows = get_monthly_profits(self.db)

        self.assertEqual([row["anno_mese"] for row in rows], ["2025-12", "2026-01", "2026-02"])
        self.assertEqual([row["mese"] for row in rows], ["Dicembre", "Gennaio", "Febbraio"])
        self.assertEqual([row["totale_pagato"] for row in rows], [80, 25, 0])

    def test_month_helpers(self):
        self.assertEqual(month_key(2026, 3), "2026-03")
        self.assertEqual(month_label(9), "Settembre")


class MaterialOrderCountTests(unittest.TestCase):
    def setUp(self):
        self.engine, self.SessionLocal = make_session_factory()
        self.db = self.SessionLocal()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_counts_every_order_including_unused_materials(self):
        cliente = add_cliente(self.db)
        gazebo = add_materiale(self.db, nome="Gazebo")
        sedie = add_materiale(self.db, nome="Sedie")
        add_materiale(self.db, nome="Tavoli")
        add_ordine(self.db, cliente, sedie, ritirato=True, pagato=True)
        add_ordine(self.db, cliente, sedie)
        add_ordine(self.db, cliente, gazebo, consegnato=True)

        rows = get_material_order_counts(self.db)

        self.assertEqual(
            rows,
            [
                {"nome": "Sedie", "numero_ordini": 2},
                {"nome": "Gazebo", "numero_ordini": 1},
                {"nome": "Tavoli", "numero_ordini": 0},
            ],
        )


if __name__ == "__main__":
    unittest.main()
