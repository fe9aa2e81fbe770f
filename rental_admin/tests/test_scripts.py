import contextlib
import io
import tempfile
import unittest
from datetime import date
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

from support import add_cliente, add_materiale, add_ordine

from db.base import Base
from db.engine import build_engine
from models.rental_models import Admin, Ordine
from scripts import db_overview, upsert_admin
from services.password_service import verify_password_hash


class UpsertAdminScriptTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db_url = f"sqlite:///{Path(self.tmpdir.name) / 'rental.db'}"

    def tearDown(self):
        self.tmpdir.cleanup()

    def _run(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = upsert_admin.main([*argv, "--db-url", self.db_url])
        return code, out.getvalue()

    def test_creates_then_updates_hashed_admin(self):
        code, output = self._run("--username", "admin", "--password", "primo")
        self.assertEqual(code, 0)
        self.assertIn("created", output)

        code, output = self._run("--username", "admin", "--password", "secondo")
        self.assertEqual(code, 0)
        self.assertIn("updated", output)

        engine = build_engine(self.db_url)
        with Session(engine) as db:
            admins = db.execute(select(Admin)).scalars().all()
        engine.dispose()
        self.assertEqual(len(admins), 1)
        self.assertNotEqual(admins[0].password, "secondo")
        self.assertTrue(verify_password_hash("secondo", admins[0].password))
        self.assertFalse(verify_password_hash("primo", admins[0].password))

    def test_short_password_is_refused(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                self._run("--username", "admin", "--password", "abc")


class DbOverviewScriptTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db_url = f"sqlite:///{Path(self.tmpdir.name) / 'rental.db'}"
        self.engine = build_engine(self.db_url)

    def tearDown(self):
        self.engine.dispose()
        self.tmpdir.cleanup()

    def test_reports_missing_tables_on_empty_database(self):
        results = {row.name: row for row in db_overview.run_existence_checks(self.engine)}

        self.assertFalse(results["table:ordini"].ok)
        self.assertEqual(db_overview.run_integrity_checks(self.engine), [])

    def test_flags_orphans_and_overbooking(self):
        Base.metadata.create_all(bind=self.engine)
        with Session(self.engine) as db:
            cliente = add_cliente(db)
            gazebo = add_materiale(db, nome="Gazebo", stock=2, prezzo=10)
            add_ordine(db, cliente, gazebo, quantita=3, data_consegna=date(2026, 5, 1), totale=30)
            add_ordine(db, cliente, gazebo, quantita=9, totale=90, ritirato=True)
            db.add(Ordine(cliente_id=4040, materiale_id=gazebo.id, quantita=0, km=0, totale=0))
            db.commit()

        self.assertTrue(all(row.ok for row in db_overview.run_existence_checks(self.engine)))
        self.assertTrue(all(row.ok for row in db_overview.run_column_checks(self.engine)))
        checks = {row.name: row for row in db_overview.run_integrity_checks(self.engine)}
        self.assertFalse(checks["ordini:orphan_cliente_id"].ok)
        self.assertTrue(checks["ordini:orphan_materiale_id"].ok)
        self.assertEqual(checks["ordini:total_differs_from_current_price"].detail, "count=0")
        self.assertFalse(checks["materiali:overbooked"].ok)
        self.assertIn("Gazebo", checks["materiali:overbooked"].detail)

    def test_main_exit_codes(self):
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertEqual(db_overview.main(["--db-url", ""]), 2)
            self.assertEqual(db_overview.main(["--db-url", self.db_url]), 0)


if __name__ == "__main__":
    unittest.main()
