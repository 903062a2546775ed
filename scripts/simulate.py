"""
Concurrent Order Simulation Script

Fires many checkouts at a running server with random carts and prints a
summary. Every order is then cross-checked against the server's price
snapshot and the admin revenue summary.

Run from project root: python scripts/simulate.py --orders 50

Version: 1.0.0
"""

import argparse
import asyncio
import os
import random
import sys
import time
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tequilas.client import ApiError, Cart, TequilasClient  # noqa: E402

# Configuration
API_BASE_URL = os.getenv("TEQUILAS_API_URL", "http://localhost:8001")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@site.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "Admin123$")
TOTAL_ORDERS = 50

# Sample data for random orders
FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson", "Taylor"]
STREETS = ["Main St", "Broadway", "5th Avenue", "Park Ave", "Madison Ave", "Lexington Ave", "Amsterdam Ave"]
PAYMENT_METHODS = ["card", "cash", "Card on delivery"]


def generate_random_customer() -> dict[str, str]:
    """Generate random delivery details."""
    return {
        "full_name": f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
        "address": f"{random.randint(1, 999)} {random.choice(STREETS)}",
        "contact_number": f"555-{random.randint(100, 999)}-{random.randint(1000, 9999)}",
        "payment_method": random.choice(PAYMENT_METHODS),
    }


def generate_random_cart(products: list[dict[str, Any]]) -> Cart:
    """Pick 1-4 products and click "add" 1-3 times on each."""
    cart = Cart()
    for product in random.sample(products, k=min(len(products), random.randint(1, 4))):
        for _ in range(random.randint(1, 3)):
            cart = cart.add(product["productId"], product["name"], Decimal(str(product["price"])))
    return cart


async def send_order(
    client: TequilasClient,
    products: list[dict[str, Any]],
    order_num: int,
) -> dict[str, Any]:
    """Check out one random cart."""
    cart = generate_random_cart(products)
    start_time = time.time()

    try:
        data = await client.place_order(cart, **generate_random_customer())
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": True,
            "order_id": data.get("orderId"),
            "total": Decimal(str(data.get("totalAmount"))),
            "expected": cart.estimated_total,
            "time": elapsed,
        }
    except (ApiError, httpx.HTTPError) as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """
    Run the concurrent checkout simulation.

    Args:
        num_orders: Number of orders to fire at once
    """
    print("=" * 70)
    print("🔥 ORDER SIMULATION - HIGH CONCURRENCY TEST")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    suffix = uuid.uuid4().hex[:8]
    email = f"sim_{suffix}@example.com"
    password = f"Sim!{suffix}A1"

    async with TequilasClient(API_BASE_URL) as client:
        await client.register(f"sim_{suffix}", email, password)
        await client.login(email, password)
        products = await client.list_products()

        print(f"\n🚀 Firing {num_orders} orders over {len(products)} products...\n")
        start_time = time.time()
        results = await asyncio.gather(
            *(send_order(client, products, i + 1) for i in range(num_orders))
        )
        total_time = round(time.time() - start_time, 2)

        history = await client.my_orders()

    # Analyze results
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    mispriced = [r for r in successful if r["total"] != r["expected"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")
    print(f"📜 Orders in history: {len(history)}")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        min_time = min(r["time"] for r in successful)
        max_time = max(r["time"] for r in successful)
        total_revenue = sum((r["total"] for r in successful), Decimal("0.00"))

        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min_time}s")
        print(f"   Slowest: {max_time}s")
        print(f"   💰 Total Revenue: ${total_revenue:.2f}")

    if mispriced:
        print(f"\n⚠️  {len(mispriced)} order(s) priced differently than the menu shown to the client")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    await verify_admin_summary(len(successful))

    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def verify_admin_summary(expected_new_orders: int) -> None:
    """Compare today's admin summary with what was just placed."""
    today = datetime.now().date().isoformat()

    async with TequilasClient(API_BASE_URL) as admin:
        try:
            await admin.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        except ApiError as e:
            print(f"\n⚠️  Admin login failed, skipping summary check: {e}")
            return

        summary = await admin.order_summary(today, today)

    print("\n" + "=" * 70)
    print("🔍 ADMIN SUMMARY (today)")
    print("=" * 70)
    print(f"   Orders today: {summary['totalOrders']} (>= {expected_new_orders} expected)")
    print(f"   Revenue today: ${summary['totalRevenue']}")


async def test_single_flows() -> bool:
    """Test individual flows before the simulation."""
    print("\n" + "=" * 70)
    print("🧪 TESTING INDIVIDUAL FLOWS")
    print("=" * 70)

    async with httpx.AsyncClient() as http:
        # Test 1: Health check
        print("\n1️⃣ Health Check...")
        response = await http.get(f"{API_BASE_URL}/health")
        if response.status_code == 200:
            data = response.json()
            print(f"   ✅ Status: {data.get('status')}")
            print(f"   Database: {data.get('database')}")
            print(f"   Image storage: {data.get('image_storage')}")
        else:
            print(f"   ❌ Failed: {response.text}")
            return False

    async with TequilasClient(API_BASE_URL) as client:
        # Test 2: Menu
        print("\n2️⃣ Menu...")
        products = await client.list_products()
        if not products:
            print("   ❌ No products on the menu")
            return False
        print(f"   ✅ {len(products)} products")

        # Test 3: Anonymous checkout is refused
        print("\n3️⃣ Anonymous Checkout...")
        try:
            await client.place_order(generate_random_cart(products), **generate_random_customer())
            print("   ❌ Order accepted without a token")
            return False
        except ApiError as e:
            print(f"   ✅ Refused with HTTP {e.status_code}")

    print("\n" + "=" * 70)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrent Order Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--skip-tests", action="store_true", help="Skip individual tests")
    args = parser.parse_args()

    # Run tests first
    if not args.skip_tests:
        success = asyncio.run(test_single_flows())
        if not success:
            print("\n❌ Pre-flight tests failed. Fix issues before running simulation.")
            sys.exit(1)

        print("\n✅ Pre-flight tests passed!")

    asyncio.run(run_simulation(num_orders=args.orders))
