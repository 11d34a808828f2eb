# nosabos/utils/financial.py - Budget parsing and chart layout for the financial tool

import re
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

LINE_PATTERN = re.compile(r"([a-z\s]+)[:.]?\s*\$?(\d+(?:,\d{3})*(?:\.\d{2})?)", re.IGNORECASE)

GOAL_KEYWORDS = ("goal", "save", "target")
INCOME_KEYWORDS = ("income", "salary", "earn")

BAR_COLORS = [
    "#ef4444",  # red
    "#f97316",  # orange
    "#eab308",  # yellow
    "#22c55e",  # green
    "#06b6d4",  # cyan
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#6366f1",  # indigo
]
INCOME_COLOR = "#10b981"
GOAL_RING_COLOR = "#a855f7"

MAX_BAR_HEIGHT = 5.0
MIN_BAR_HEIGHT = 0.1
BAR_WIDTH = 0.6
BAR_SPACING = 1.2
INCOME_BAR_Z = -3.0


def parse_financial_input(text: str) -> Dict[str, Any]:
    """Extract income, a savings goal and expenses from free-form lines like 'rent: $1,500'"""
    expenses: List[Dict[str, Any]] = []
    goal: Optional[float] = None
    income: Optional[float] = None

    for line in (text or "").lower().split("\n"):
        if not line.strip():
            continue
        match = LINE_PATTERN.search(line)
        if not match:
            continue

        category = match.group(1).strip()
        amount = float(match.group(2).replace(",", ""))

        if any(word in category for word in GOAL_KEYWORDS):
            goal = amount
        elif any(word in category for word in INCOME_KEYWORDS):
            income = amount
        else:
            expenses.append({"category": category, "amount": amount})

    total_expenses = sum(e["amount"] for e in expenses)
    remaining = income - total_expenses if income else 0
    goal_progress = (remaining / goal) * 100 if goal and income else 0

    return {
        "expenses": expenses,
        "income": income,
        "goal": goal,
        "totalExpenses": total_expenses,
        "remaining": remaining,
        "goalProgress": min(100, max(0, goal_progress)),
    }


def build_chart_bars(data: Dict[str, Any]) -> Dict[str, Any]:
    """Lay out the 3D bar chart: one bar per expense, an income bar behind them and a goal ring"""
    expenses = data.get("expenses") or []
    income = data.get("income")
    goal = data.get("goal")

    scale_max = max([e["amount"] for e in expenses] + [income or 0])
    if scale_max <= 0:
        return {"bars": [], "incomeBar": None, "goalRing": None, "maxHeight": MAX_BAR_HEIGHT}

    total_width = len(expenses) * BAR_SPACING
    start_x = -total_width / 2 + BAR_SPACING / 2

    bars = []
    for index, expense in enumerate(expenses):
        height = max(MIN_BAR_HEIGHT, expense["amount"] / scale_max * MAX_BAR_HEIGHT)
        bars.append({
            "category": expense["category"],
            "amount": expense["amount"],
            "height": height,
            "width": BAR_WIDTH,
            "x": start_x + index * BAR_SPACING,
            "z": 0.0,
            "color": BAR_COLORS[index % len(BAR_COLORS)],
        })

    income_bar = None
    if income:
        income_bar = {
            "amount": income,
            "height": income / scale_max * MAX_BAR_HEIGHT,
            "x": 0.0,
            "z": INCOME_BAR_Z,
            "color": INCOME_COLOR,
        }

    goal_ring = None
    if goal and income:
        goal_ring = {
            "amount": goal,
            "y": (income - goal) / scale_max * MAX_BAR_HEIGHT + 0.5,
            "x": 0.0,
            "z": INCOME_BAR_Z,
            "color": GOAL_RING_COLOR,
        }

    return {"bars": bars, "incomeBar": income_bar, "goalRing": goal_ring, "maxHeight": MAX_BAR_HEIGHT}
