# scripts/smoke_test_pipeline.py
"""
Comment Pipeline Smoke Test
Validates configuration, YouTube connectivity and the end-to-end sentiment pipeline

Run: python scripts/smoke_test_pipeline.py [VIDEO_ID]
"""

import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent.parent

dotenv_path = ROOT_DIR / ".env"
if dotenv_path.exists():
    load_dotenv(dotenv_path)
    print(f"✅ Loaded .env from: {dotenv_path}")
else:
    print(f"⚠️  .env file not found at: {dotenv_path}")

from comment_analytics.app.config import get_config, setup_logging, validate_config
from comment_analytics.app.dependencies import (
    close_clients,
    get_analytics_service,
    get_comment_pipeline,
)
from comment_analytics.services import ServiceError

DEFAULT_VIDEO_ID = "dQw4w9WgXcQ"


def print_section(title: str):
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


def check_config() -> bool:
    print_section("1️⃣  Configuration")

    config = get_config()
    result = validate_config(config)

    for error in result["errors"]:
        print(f"❌ {error}")
    for warning in result["warnings"]:
        print(f"⚠️  {warning}")

    summary = config.get_summary()
    print(f"   YouTube key set: {summary['youtube_api']['api_key_set']}")
    print(f"   Groq key set: {summary['llm']['api_key_set']}")
    print(f"   Model: {summary['llm']['model']}")
    print(f"   Stub classifier: {summary['pipeline']['stub_classifier']}")

    if not os.getenv("YOUTUBE_API_KEY") and not config.youtube_api.api_key:
        print("\n   To fix:")
        print("   1. Create a .env file in the project root")
        print("   2. Add YOUTUBE_API_KEY (and optionally GROQ_API_KEY)")
        print("   3. Get a key from: https://console.cloud.google.com/apis/credentials")

    return result["valid"]


async def check_distribution(video_id: str) -> bool:
    print_section("2️⃣  Distribution View (top 100 by relevance)")

    try:
        view = await get_comment_pipeline().fetch_for_distribution(video_id)
    except ServiceError as e:
        print(f"❌ {e.error_code}: {e.message}")
        return False

    distribution = view.distribution
    print(f"✅ Classified {distribution.total} comments")
    for label, share in distribution.percentages().items():
        print(f"   {label:>8}: {share:5.1f}%")

    fallbacks = sum(1 for c in view.comments if c.is_fallback)
    if fallbacks:
        print(f"⚠️  {fallbacks} comments received the neutral fallback")
    return True


async def check_display(video_id: str) -> bool:
    print_section("3️⃣  Display Feed (latest 25, page of 10)")

    try:
        page = await get_comment_pipeline().fetch_for_display(video_id, limit=10)
    except ServiceError as e:
        print(f"❌ {e.error_code}: {e.message}")
        return False

    for comment in page.comments:
        text = comment.text.replace("\n", " ")[:60]
        print(f"   [{comment.sentiment.value:>8}] {comment.detected_language} | {text}")

    print(f"\n   Analyzed: {page.total_analyzed}/{page.total_available}")
    print(f"   Next page token: {page.next_page_token}")
    return True


async def check_analytics(video_id: str) -> bool:
    print_section("4️⃣  Video Analytics")

    try:
        result = await get_analytics_service().get_video_analytics(video_id)
    except ServiceError as e:
        print(f"❌ {e.error_code}: {e.message}")
        return False

    print(f"   Engagement rate: {result.engagement_rate}%")
    print(f"   Days since publish: {result.days_since_publish}")
    print(f"   View velocity: {result.view_velocity:,}/day")
    print(f"   Virality score: {result.virality_score}")
    return True


async def main(video_id: str) -> int:
    setup_logging()

    if not check_config():
        print("\n❌ Configuration invalid, aborting")
        return 1

    try:
        results = [
            await check_distribution(video_id),
            await check_display(video_id),
            await check_analytics(video_id),
        ]
    finally:
        await close_clients()

    print_section("Summary")
    passed = sum(results)
    print(f"   {passed}/{len(results)} checks passed")
    return 0 if all(results) else 1


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_VIDEO_ID
    sys.exit(asyncio.run(main(target)))
