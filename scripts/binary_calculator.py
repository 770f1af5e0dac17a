#!/usr/bin/env python3
"""
Binary calculator - simulate one matching run of the binary plan.

Shows leg volumes, cycles, deductions, commission and what the daily cap flushes.

Usage:
    python scripts/binary_calculator.py [--left N] [--right N] [--price AMOUNT]
    python scripts/binary_calculator.py --presets
"""

import sys
import os
import argparse
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from affiliate_system.services.cycle_service import CycleMatchEstimator, SimulatorSettings

import logging

logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)


def format_money(value) -> str:
    return f"₱{Decimal(value):,.2f}"


def print_result(result, title=None):
    """Print one simulation result."""
    if title:
        print(f"\n=== {title} ===")

    print(f"Left leg:   {format_money(result['leftLegVolume'])} "
          f"(remaining {format_money(result['leftLegRemaining'])})")
    print(f"Right leg:  {format_money(result['rightLegVolume'])} "
          f"(remaining {format_money(result['rightLegRemaining'])})")
    print(f"Cycles:     {result['cyclesCompleted']} "
          f"(matched {format_money(result['totalMatchedVolume'])})")
    print(f"AI cost:        -{format_money(result['aiCostDeduction'])}")
    print(f"Admin profit:   -{format_money(result['adminProfitDeduction'])}")
    print(f"Direct ref.:    -{format_money(result['directReferralDeduction'])}")
    print(f"Distributable:  {format_money(result['distributableAmount'])}")
    print(f"Commission:     {format_money(result['commissionEarned'])}")

    if result["isCapped"]:
        print(f"⚠️  Capped at {format_money(result['actualCommission'])}, "
              f"flushed {format_money(result['commissionLost'])}")

    print(f"Admin earnings: {format_money(result['adminEarnings'])}")


def main():
    parser = argparse.ArgumentParser(description='Simulate binary cycle earnings')
    parser.add_argument('--left', type=int, default=4, help='Users on the left leg')
    parser.add_argument('--right', type=int, default=4, help='Users on the right leg')
    parser.add_argument('--price', type=Decimal, default=Decimal("2990"), help='Tier price per user')
    parser.add_argument('--cycle-volume', type=Decimal, default=Decimal("11960"))
    parser.add_argument('--ai-cost', type=Decimal, default=Decimal("30"), help='AI cost percent')
    parser.add_argument('--admin-profit', type=Decimal, default=Decimal("10"), help='Admin profit percent')
    parser.add_argument('--direct-referral', type=Decimal, default=Decimal("5"), help='Direct referral percent')
    parser.add_argument('--commission', type=Decimal, default=Decimal("10"), help='Cycle commission percent')
    parser.add_argument('--daily-cap', type=Decimal, default=Decimal("50000"))
    parser.add_argument('--presets', action='store_true', help='Run all preset scenarios')

    args = parser.parse_args()

    settings = SimulatorSettings(
        cycle_volume=args.cycle_volume,
        ai_cost_percent=args.ai_cost,
        admin_profit_percent=args.admin_profit,
        direct_referral_percent=args.direct_referral,
        cycle_commission_percent=args.commission,
        daily_cap=args.daily_cap,
    )
    estimator = CycleMatchEstimator()

    if args.presets:
        for result in estimator.simulatePresets(settings):
            print_result(result, result["name"])
        return

    result = estimator.simulate(args.left, args.right, args.price, settings)
    print_result(result, f"{args.left} left x {args.right} right @ {format_money(args.price)}")


if __name__ == "__main__":
    main()
