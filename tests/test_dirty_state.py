import unittest
from datetime import date

from grid_app.dirty_state import (
    apply_edit,
    build_update_batch,
    clear_modified,
    clone_records,
    is_eligible_for_submit,
)
from grid_app.enums import Gender
from grid_app.models import Record


def _records():
    return [
        Record(id=1, name="Ann", email="ann@example.com", gender=Gender.FEMALE, dob=date(1990, 1, 2), extra={"team": "a"}),
        Record(id=5, name="Bob", email="bob@example.com", gender=Gender.MALE, favourite="red"),
        Record(id=9, name="Cid", email="cid@example.com", location="Paris"),
    ]


class ApplyEditTests(unittest.TestCase):
    def test_edits_one_field_and_flags_record(self):
        records = _records()
        result = apply_edit(records, 1, "email", "a@b.com")

        self.assertEqual(result[1].email, "a@b.com")
        self.assertTrue(result[1].is_modified)

    def test_input_collection_is_not_mutated(self):
        records = _records()
        result = apply_edit(records, 0, "name", "Anna")
        result[2].name = "changed"
        result[0].extra["team"] = "b"

        self.assertEqual(records[0].name, "Ann")
        self.assertFalse(records[0].is_modified)
        self.assertEqual(records[2].name, "Cid")
        self.assertEqual(records[0].extra, {"team": "a"})

    def test_nested_extra_values_are_not_shared(self):
        records = [Record.from_dict({"id": 1, "name": "Ann", "address": {"city": "Pune"}})]
        result = apply_edit(records, 0, "name", "Bea")
        result[0].extra["address"]["city"] = "Delhi"

        self.assertEqual(records[0].extra["address"], {"city": "Pune"})

    def test_other_records_and_fields_are_unchanged(self):
        records = _records()
        result = apply_edit(records, 0, "location", "Rome")

        self.assertEqual(result[1:], records[1:])
        edited, original = result[0], records[0]
        for key in ("id", "name", "email", "phone_number", "gender", "favourite", "dob"):
            self.assertEqual(getattr(edited, key), getattr(original, key))
        self.assertEqual(edited.location, "Rome")

    def test_values_are_coerced_to_field_types(self):
        result = apply_edit(_records(), 2, "dob", "2001-12-31")
        self.assertEqual(result[2].dob, date(2001, 12, 31))

        result = apply_edit(result, 2, "gender", "male")
        self.assertIs(result[2].gender, Gender.MALE)

    def test_flag_stays_set_on_later_edits(self):
        result = apply_edit(_records(), 0, "name", "A")
        result = apply_edit(result, 0, "name", "Ann")
        self.assertTrue(result[0].is_modified)

    def test_rejects_non_editable_field(self):
        with self.assertRaises(ValueError):
            apply_edit(_records(), 0, "id", 2)

    def test_rejects_bad_index(self):
        with self.assertRaises(IndexError):
            apply_edit(_records(), 3, "name", "x")


class EligibilityTests(unittest.TestCase):
    def test_empty_collection(self):
        self.assertFalse(is_eligible_for_submit([]))

    def test_nothing_modified(self):
        self.assertFalse(is_eligible_for_submit(_records()))

    def test_one_modified(self):
        self.assertTrue(is_eligible_for_submit(apply_edit(_records(), 2, "name", "Cyd")))


class BatchTests(unittest.TestCase):
    def test_batch_only_takes_selected_modified_records(self):
        records = apply_edit(_records(), 0, "name", "Anna")
        records = apply_edit(records, 1, "name", "Bobby")

        batch = build_update_batch(records, {1, 9})

        self.assertEqual([r.id for r in batch], [1])

    def test_clear_modified_returns_copies(self):
        records = apply_edit(_records(), 0, "name", "Anna")
        cleared = clear_modified(records)

        self.assertFalse(any(r.is_modified for r in cleared))
        self.assertTrue(records[0].is_modified)
        self.assertEqual(cleared[0].name, "Anna")

    def test_clone_records_copies_each_record(self):
        records = _records()
        copies = clone_records(records)
        self.assertEqual(copies, records)
        self.assertIsNot(copies[0], records[0])


if __name__ == "__main__":
    unittest.main()
