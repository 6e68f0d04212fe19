import pytest

from freight.models.catalog import ChecklistItem


@pytest.mark.asyncio
async def test_lists_enabled_items_in_order(client, db):
    db.add_all([
        ChecklistItem.create("Keep upright", category="handling", sort_order=2),
        ChecklistItem.create("Fragile", category="handling", sort_order=1, has_extra_fee=True, base_extra_fee=5000),
        ChecklistItem.create("Retired", sort_order=0, enabled=False),
        ChecklistItem.create("Gate code", sort_order=3, requires_extra_input=True, extra_input_label="Code"),
    ])
    await db.commit()

    response = await client.get("/checklist-items/")

    assert response.status_code == 200
    items = response.json()
    assert [i["name"] for i in items] == ["Fragile", "Keep upright", "Gate code"]
    assert items[0]["has_extra_fee"] is True
    assert items[2]["extra_input_label"] == "Code"
