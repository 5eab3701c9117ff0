import unittest

from grid_app.components.user_table import ColumnConfig, UserTable, values_lookup
from grid_app.enums import SortDirection
from grid_app.models import PageResult, Record, SortSpec

COLUMNS = [
    ColumnConfig(key="id", label="ID"),
    ColumnConfig(key="name", label="Name", editable=True, header_filter="input"),
    ColumnConfig(key="gender", label="Gender", editable=True, header_filter="list", header_filter_values={"male": "Male", "female": "Female"}),
    ColumnConfig(key="favourite", label="Favourite Color", editable=True, header_filter="list", values_lookup=True),
    ColumnConfig(key="dob", label="Date Of Birth", editable=True, header_filter="date"),
]


class FakeProvider:
    def __init__(self, pages=3, fail=False):
        self.requests = []
        self.pages = pages
        self.fail = fail

    def __call__(self, request):
        self.requests.append(request)
        if self.fail:
            raise RuntimeError("connection refused")
        base = (request.page - 1) * 10
        records = [Record(id=base + i, name=f"user{base + i}", favourite=["red", "Blue"][i % 2]) for i in range(1, 4)]
        return PageResult(records=records, last_page=self.pages, total=self.pages * 3)


class UserTableTests(unittest.TestCase):
    def setUp(self):
        self.provider = FakeProvider()
        self.notes = []
        self.table = UserTable(
            COLUMNS,
            self.provider,
            page_size=200,
            filter_delay_ms=0,
            notify=lambda message, kind: self.notes.append((message, kind)),
        )
        self.selection_events = []
        self.edits = []
        self.table.on_selection_changed = self.selection_events.append
        self.table.on_cell_edited = lambda rid, key, value: self.edits.append((rid, key, value))
        self.table.refresh()

    def test_refresh_loads_first_page(self):
        self.assertEqual(self.provider.requests[-1].page, 1)
        self.assertEqual(self.provider.requests[-1].per_page, 200)
        self.assertEqual([r.id for r in self.table.get_data()], [1, 2, 3])
        self.assertEqual(len(self.table.table.rows), 3)
        self.assertEqual(self.table.total_pages, 3)

    def test_selection_queries(self):
        self.table.toggle_select(2, True)
        self.assertTrue(self.table.is_record_selected(2))
        self.assertFalse(self.table.is_record_selected(1))
        self.assertEqual([r.id for r in self.table.get_selected_data()], [2])
        self.assertEqual(len(self.selection_events), 1)

        self.table.deselect_rows([2])
        self.assertFalse(self.table.is_record_selected(2))
        self.assertEqual(len(self.selection_events), 2)

    def test_select_all_and_page_change_clears_selection(self):
        self.table.toggle_select_all(True)
        self.assertEqual(len(self.table.get_selected_data()), 3)

        self.table.load_page(2)

        self.assertEqual(self.provider.requests[-1].page, 2)
        self.assertEqual(self.table.get_selected_data(), [])
        self.assertEqual(self.selection_events[-1], [])

    def test_load_page_out_of_range_is_ignored(self):
        calls = len(self.provider.requests)
        self.table.load_page(4)
        self.table.load_page(0)
        self.assertEqual(len(self.provider.requests), calls)

    def test_update_data_replaces_by_id(self):
        self.table.update_data([Record(id=2, name="changed", is_modified=True)])
        self.assertEqual(self.table.get_data()[1].name, "changed")
        self.assertEqual(self.table.get_data()[0].name, "user1")

    def test_sort_cycles_asc_desc_off(self):
        self.table.toggle_sort("name")
        self.assertEqual(list(self.provider.requests[-1].sorts), [SortSpec("name", SortDirection.ASC)])
        self.table.toggle_sort("gender")
        self.table.toggle_sort("name")
        self.assertEqual(
            list(self.provider.requests[-1].sorts),
            [SortSpec("gender", SortDirection.ASC), SortSpec("name", SortDirection.DESC)],
        )
        self.table.toggle_sort("name")
        self.assertEqual(list(self.provider.requests[-1].sorts), [SortSpec("gender", SortDirection.ASC)])

    def test_header_filters(self):
        self.table.set_header_filter("gender", "male")
        self.table.set_header_filter("name", "  ")
        filters = self.table.get_header_filters()
        self.assertEqual([(f.field, f.value) for f in filters], [("gender", "male")])
        self.assertEqual(list(self.provider.requests[-1].filters), filters)

        self.table.reset()
        self.assertEqual(self.table.get_header_filters(), [])
        self.assertEqual(self.table.sorts, [])

    def test_edit_refused_unless_gate_allows(self):
        self.assertFalse(self.table.start_edit(1, "name"))
        self.table.can_edit = self.table.is_record_selected
        self.assertFalse(self.table.start_edit(1, "name"))
        self.table.toggle_select(1, True)
        self.assertTrue(self.table.start_edit(1, "name"))
        self.assertFalse(self.table.start_edit(1, "id"))

    def test_committed_edit_is_reported(self):
        self.table.can_edit = lambda rid: True
        self.table.start_edit(1, "name")
        self.table.active_editor.set_input("Ann")
        self.table.handle_key("Enter")

        self.assertEqual(self.edits, [(1, "name", "Ann")])
        self.assertIsNone(self.table.active_editor)

    def test_unchanged_or_cancelled_edit_is_not_reported(self):
        self.table.can_edit = lambda rid: True
        self.table.start_edit(1, "name")
        self.table.handle_key("Enter")
        self.table.start_edit(1, "name")
        self.table.active_editor.set_input("other")
        self.table.handle_key("Escape")
        self.assertEqual(self.edits, [])

    def test_fetch_failure_shows_empty_state(self):
        table = UserTable(COLUMNS, FakeProvider(fail=True), notify=lambda m, k: self.notes.append((m, k)))
        with self.assertLogs("grid_app.components.user_table", level="ERROR"):
            table.refresh()
        self.assertEqual(table.get_data(), [])
        self.assertIn("connection refused", table.status.value)
        self.assertEqual(self.notes[-1][1], "error")

    def test_values_lookup(self):
        self.assertEqual(values_lookup(self.table.get_data(), "favourite"), ["Blue", "red"])


if __name__ == "__main__":
    unittest.main()
