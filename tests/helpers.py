"""Builders shared by the test modules."""

from participium.models.report import Category, Report, ReportCreate
from participium.repositories.base import ReportStore

WASTE_OFFICE = "sanitation and waste management officer"
PUBLIC_WORKS = "public works project manager"
ADMIN_OFFICE = "municipal administrator"


def submit(
    store: ReportStore,
    category: Category = Category.WASTE,
    user_id=7,
    title: str = "Overflowing bins",
) -> Report:
    return store.create(ReportCreate(
        title=title,
        description="Bins on Via Roma have not been emptied for a week",
        category=category,
        latitude=45.0703,
        longitude=7.6869,
        photos=["reports/tmp/1.jpg"],
        user_id=user_id,
    ))
