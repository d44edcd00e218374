"""
Session context: which company is open and which tab is showing.

Passed explicitly into intents so the store itself holds no UI state.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ActiveView(str, Enum):
    DASHBOARD = "dashboard"
    COMPANY = "company"


class ActiveTab(str, Enum):
    ACCOUNTS = "accounts"
    SUBSCRIPTIONS = "subscriptions"
    FINANCIALS = "financials"
    DOCUMENTS = "documents"
    INSIGHTS = "insights"


class SessionContext(BaseModel):
    """Navigation state the view layer passes along with every intent."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    selected_company_id: Optional[str] = None
    active_view: ActiveView = ActiveView.DASHBOARD
    active_tab: ActiveTab = ActiveTab.ACCOUNTS

    def open_company(self, company_id: str, tab: ActiveTab = ActiveTab.ACCOUNTS) -> "SessionContext":
        return self.model_copy(update={
            "selected_company_id": company_id,
            "active_view": ActiveView.COMPANY,
            "active_tab": tab,
        })

    def show_dashboard(self) -> "SessionContext":
        return self.model_copy(update={
            "selected_company_id": None,
            "active_view": ActiveView.DASHBOARD,
        })

    def with_tab(self, tab: ActiveTab) -> "SessionContext":
        return self.model_copy(update={"active_tab": ActiveTab(tab)})
