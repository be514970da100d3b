import unittest
from datetime import timedelta
from decimal import Decimal

from pydantic import ValidationError as SchemaValidationError

from support import T0, RepositoryFactory, seed

from lims.errors import NotFoundError
from lims.models.component import ComponentCategory
from lims.models.movement import MovementType
from lims.schemas.component import ComponentCreate, ComponentFilter, ComponentUpdate
from lims.services import catalog_service, ledger_service, stock_service


def resistor(**overrides) -> ComponentCreate:
    fields = dict(
        name="Carbon Film Resistor",
        manufacturer="Yageo",
        part_number="CFR-25JB-52-10K",
        description="10kΩ ±5% 1/4W Carbon Film Resistor",
        category=ComponentCategory.RESISTORS,
        location="A1-B2",
        unit_price=Decimal("0.05"),
        quantity=1500,
        critical_low_threshold=100,
        datasheet_link="https://example.com/datasheet1",
    )
    fields.update(overrides)
    return ComponentCreate(**fields)


class CatalogCases(RepositoryFactory):
    def setUp(self) -> None:
        self.repo = self.make_repo()

    def create(self, data, offset=0):
        return catalog_service.create_component(
            self.repo, data, user_id="admin-1", username="admin", now=T0 + timedelta(seconds=offset)
        )

    def test_create_records_initial_stock_movement(self) -> None:
        component = self.create(resistor())

        self.assertEqual(component.quantity, 1500)
        self.assertEqual(component.created_by, "admin-1")
        self.assertEqual(component.created_at, T0)
        self.assertEqual(component.last_movement, T0)
        [movement] = ledger_service.list_by_component(self.repo, component.id)
        self.assertEqual(movement.type, MovementType.INWARD)
        self.assertEqual(movement.quantity, 1500)
        self.assertEqual(movement.balance_after, 1500)
        self.assertEqual(movement.username, "admin")

    def test_create_without_stock_has_no_movement(self) -> None:
        component = self.create(resistor(quantity=0))
        self.assertIsNone(component.last_movement)
        self.assertEqual(ledger_service.list_by_component(self.repo, component.id), [])

    def test_get_unknown_component(self) -> None:
        with self.assertRaises(NotFoundError):
            catalog_service.get_component(self.repo, "missing")

    def test_update_descriptive_fields(self) -> None:
        component = self.create(resistor())
        updated = catalog_service.update_component(
            self.repo,
            component.id,
            ComponentUpdate(location="Drawer 7", critical_low_threshold=200, datasheet_link=None),
        )

        self.assertEqual(updated.location, "Drawer 7")
        self.assertEqual(updated.critical_low_threshold, 200)
        self.assertIsNone(updated.datasheet_link)
        self.assertEqual(updated.name, "Carbon Film Resistor")
        self.assertEqual(updated.quantity, 1500)
        self.assertEqual(catalog_service.get_component(self.repo, component.id).location, "Drawer 7")

    def test_update_unknown_component(self) -> None:
        with self.assertRaises(NotFoundError):
            catalog_service.update_component(self.repo, "missing", ComponentUpdate(location="X"))

    def test_delete_keeps_movement_history(self) -> None:
        component = self.create(resistor())
        stock_service.record_movement(
            self.repo, component.id, "outward", 200, "u1", "tech1", "Production use", now=T0
        )

        catalog_service.delete_component(self.repo, component.id)

        with self.assertRaises(NotFoundError):
            catalog_service.get_component(self.repo, component.id)
        self.assertEqual(len(ledger_service.list_by_component(self.repo, component.id)), 2)

    def test_delete_unknown_component(self) -> None:
        with self.assertRaises(NotFoundError):
            catalog_service.delete_component(self.repo, "missing")

    def test_listing_keeps_insertion_order_for_equal_timestamps(self) -> None:
        for component_id in ("b", "c", "a"):
            seed(self.repo, component_id)
        # Updating a component does not move it.
        catalog_service.update_component(self.repo, "b", ComponentUpdate(location="Drawer 2"))

        self.assertEqual([c.id for c in catalog_service.search(self.repo)], ["b", "c", "a"])


class InMemoryCatalogTests(CatalogCases, unittest.TestCase):
    backend = "memory"


class SqlCatalogTests(CatalogCases, unittest.TestCase):
    backend = "sql"


class ComponentUpdateSchemaTests(unittest.TestCase):
    def test_quantity_cannot_be_edited_directly(self) -> None:
        with self.assertRaises(SchemaValidationError):
            ComponentUpdate(quantity=5)

    def test_negative_threshold_rejected(self) -> None:
        with self.assertRaises(SchemaValidationError):
            ComponentUpdate(critical_low_threshold=-1)


class SearchTests(RepositoryFactory, unittest.TestCase):
    def setUp(self) -> None:
        self.repo = self.make_repo()
        self.resistor = catalog_service.create_component(self.repo, resistor(), now=T0)
        self.capacitor = catalog_service.create_component(
            self.repo,
            resistor(
                name="Ceramic Capacitor",
                manufacturer="Murata",
                part_number="GCM188R71H104KA57D",
                description="100nF 50V X7R Ceramic Capacitor",
                category=ComponentCategory.CAPACITORS,
                location="A2-C1",
                quantity=25,
                critical_low_threshold=50,
            ),
            now=T0,
        )
        self.opamp = catalog_service.create_component(
            self.repo,
            resistor(
                name="Operational Amplifier",
                manufacturer="Texas Instruments",
                part_number="LM358N",
                description="Dual Low-Power Operational Amplifier",
                category=ComponentCategory.ICS,
                location="B1-A3",
                quantity=80,
                critical_low_threshold=20,
            ),
            now=T0,
        )

    def ids(self, **filters):
        return [c.id for c in catalog_service.search(self.repo, ComponentFilter(**filters))]

    def test_no_filters_returns_all_in_insertion_order(self) -> None:
        expected = [self.resistor.id, self.capacitor.id, self.opamp.id]
        self.assertEqual(self.ids(), expected)
        self.assertEqual([c.id for c in catalog_service.search(self.repo)], expected)

    def test_free_text_is_case_insensitive_across_fields(self) -> None:
        self.assertEqual(self.ids(query="murata"), [self.capacitor.id])
        self.assertEqual(self.ids(query="lm358"), [self.opamp.id])
        self.assertEqual(self.ids(query="DUAL low-power"), [self.opamp.id])
        self.assertEqual(self.ids(query="capacitor"), [self.capacitor.id])
        self.assertEqual(self.ids(query="nothing like this"), [])

    def test_category_is_exact(self) -> None:
        self.assertEqual(self.ids(category=ComponentCategory.ICS), [self.opamp.id])
        self.assertEqual(self.ids(category=ComponentCategory.SENSORS), [])

    def test_location_is_substring(self) -> None:
        self.assertEqual(self.ids(location="a"), [self.resistor.id, self.capacitor.id, self.opamp.id])
        self.assertEqual(self.ids(location="c1"), [self.capacitor.id])

    def test_quantity_range_is_inclusive(self) -> None:
        self.assertEqual(self.ids(min_quantity=25, max_quantity=80), [self.capacitor.id, self.opamp.id])
        self.assertEqual(self.ids(min_quantity=81), [self.resistor.id])
        self.assertEqual(self.ids(max_quantity=0), [])

    def test_filters_combine(self) -> None:
        self.assertEqual(self.ids(query="a", category=ComponentCategory.CAPACITORS, max_quantity=25), [self.capacitor.id])


if __name__ == "__main__":
    unittest.main(verbosity=2)
