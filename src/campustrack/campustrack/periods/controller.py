from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import now_local
from ..container import Container
from ..core.constants import PERIODS_PER_DAY
from . import resolver


def register(app: Flask, container: Container) -> None:
    @app.route("/api/periods/today", methods=["GET"], endpoint="api_periods_today")
    def api_periods_today():
        """Today at a glance: the active period and every period's marking verdict."""
        now = now_local()
        day = resolver.day_of(now.date())
        periods = []
        for period in range(1, PERIODS_PER_DAY + 1):
            verdict = resolver.is_markable(day, period, now)
            periods.append(
                {
                    "period": period,
                    "time": resolver.period_time_display(day, period),
                    "allowed": verdict.allowed,
                    "reason": verdict.reason,
                }
            )
        return jsonify(
            {
                "success": True,
                "data": {
                    "day_of_week": day,
                    "current_period": resolver.current_period(day, now),
                    "periods": periods,
                },
            }
        )

    @app.route("/api/periods/<int:day>/<int:period>/markable", methods=["GET"], endpoint="api_period_markable")
    def api_period_markable(day: int, period: int):
        verdict = resolver.is_markable(day, period, now_local())
        return jsonify({"success": True, "data": {"allowed": verdict.allowed, "reason": verdict.reason}})
