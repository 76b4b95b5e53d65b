#!/usr/bin/env python3
"""
Autonomous Task Selector Main Entry Point
Runs the selection engine against the simulated task catalog, or prints the
resolved configuration.
"""

import sys
import argparse
import asyncio
import logging
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Character configurations of the demo agents
DEMO_CHARACTERS = [
    {
        "agent_id": "speed-demon",
        "profile": {"name": "SpeedDemon"},
        "decision_making": {"risk_profile": "HIGH_REWARD_AGGRESSIVE", "time_horizon": "IMMEDIATE_EXECUTION"},
        "strategic_weights": {"execution_speed": 1.5, "gas_optimization": 1.2},
    },
    {
        "agent_id": "market-analyst",
        "profile": {"name": "MarketAnalyst"},
        "decision_making": {
            "risk_profile": "MODERATE",
            "time_horizon": "MEDIUM_TERM",
            "learning_style": "PATTERN_CORRELATION_ANALYSIS",
        },
        "strategic_weights": {"pattern_recognition": 1.4, "intelligence": 1.2},
    },
    {
        "agent_id": "steady-guardian",
        "profile": {"name": "SteadyGuardian"},
        "decision_making": {"risk_profile": "CONSERVATIVE", "time_horizon": "LONG_TERM",
                            "learning_style": "EXPERIENTIAL"},
        "strategic_weights": {"intelligence": 1.3},
    },
    {
        "agent_id": "competitor-hunter",
        "profile": {"name": "CompetitorHunter"},
        "decision_making": {"risk_profile": "CALCULATED_AGGRESSIVE", "time_horizon": "SHORT_TERM",
                            "competition_approach": "DIRECT_DOMINANCE"},
        "strategic_weights": {"competitive_advantage": 1.5, "competition_beating": 1.3},
    },
]


def print_banner():
    """Print the banner."""
    print("""
╔══════════════════════════════════════════════════════════════╗
║              🎯 Autonomous Task Selector v1.0.0              ║
║     Personality-driven background task selection engine      ║
╚══════════════════════════════════════════════════════════════╝
""")


def setup_logging(level=logging.INFO):
    """Adjust the root log level; handlers come from monitoring.logger."""
    import monitoring.logger  # noqa: F401
    logging.getLogger().setLevel(level)


class ConsoleObserver:
    """Prints execution outcomes as they arrive."""

    def on_task_completed(self, event):
        print(f"  ✅ {event.agent_id}: {event.task_type} "
              f"(performance {event.actual_performance:.2f}, {event.execution_time:.2f}s)")

    def on_task_failed(self, event):
        print(f"  ❌ {event.agent_id}: {event.task_type} failed: {event.error}")


async def run_engine_mode(args):
    """Run the selection engine with simulated tasks."""
    from agents.task_selector import AutonomousTaskSelector
    from config.selector_config import load_selector_config
    from monitoring.metrics import start_metrics_server
    from tasks.demo import build_demo_catalog

    overrides = {}
    if args.interval:
        overrides["base_selection_interval"] = args.interval
    if args.cooldown is not None:
        overrides["min_task_interval"] = max(args.cooldown, 1)
        overrides["task_cooldowns"] = {}

    config = load_selector_config(overrides)
    engine = AutonomousTaskSelector(catalog=build_demo_catalog(), config=config)
    engine.subscribe(ConsoleObserver())

    if args.metrics and start_metrics_server(args.metrics_port):
        print(f"📊 Metrics: http://localhost:{args.metrics_port or engine.settings.metrics_port}/metrics")

    characters = DEMO_CHARACTERS[:max(1, args.agents)]
    for character in characters:
        state = engine.register_agent(character["agent_id"], character)
        print(f"🤖 {state.agent_id}: {state.personality.risk_profile.value}, "
              f"every {state.selection_interval:.1f}s")

    print(f"🚀 Running {len(characters)} agents for {args.duration:.0f}s...")
    await engine.start()
    try:
        await asyncio.sleep(args.duration)
    finally:
        await engine.shutdown()

    print("\n📈 Summary:")
    for character in characters:
        summary = engine.get_agent_summary(character["agent_id"])
        kinds = {}
        for decision in summary["recent_decisions"]:
            kinds[decision["kind"]] = kinds.get(decision["kind"], 0) + 1
        print(f"  {summary['agent_id']}: cycles={summary['cycles_run']} "
              f"skipped={summary['cycles_skipped']} "
              f"recent_performance={summary['recent_performance']:.2f} decisions={kinds}")


def run_status_mode(args):
    """Print the resolved configuration and catalog."""
    from config.environment import get_settings
    from config.selector_config import load_selector_config
    from tasks.catalog import describe_catalog
    from tasks.demo import build_demo_catalog

    config = load_selector_config()
    settings = get_settings()

    print("⚙️ Selector configuration:")
    for key, value in config.model_dump().items():
        print(f"  {key}: {value}")

    print(f"\n🌍 Environment: {settings.environment} "
          f"(workers={settings.executor_max_workers}, log={settings.log_level}/{settings.log_format})")

    print("\n📋 Task catalog:")
    for task_type, category, risk in describe_catalog(build_demo_catalog()):
        print(f"  {task_type:<40} {category:<26} risk={risk} cooldown={config.cooldown_for(task_type):.0f}s")


def create_parser():
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description='Autonomous background task selection engine',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py status                        # Show resolved configuration
  python main.py run                           # Run 4 demo agents for 60 seconds
  python main.py run --agents 2 --duration 30  # Fewer agents, shorter run
  python main.py run --interval 2 --cooldown 5 # Fast cycles for a quick look
  python main.py run --metrics                 # Expose Prometheus metrics
        """
    )

    parser.add_argument('mode', choices=['run', 'status'], help='Operation mode')

    parser.add_argument('--agents', type=int, default=len(DEMO_CHARACTERS), help='Number of demo agents')
    parser.add_argument('--duration', type=float, default=60.0, help='Run duration in seconds')
    parser.add_argument('--interval', type=float, help='Override base selection interval (seconds)')
    parser.add_argument('--cooldown', type=float, help='Override every task cooldown (seconds)')
    parser.add_argument('--metrics', action='store_true', help='Start the Prometheus metrics server')
    parser.add_argument('--metrics-port', type=int, help='Metrics server port')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose logging')
    parser.add_argument('--quiet', '-q', action='store_true', help='Quiet mode')

    return parser


async def main():
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.verbose:
        setup_logging(logging.DEBUG)
    elif args.quiet:
        setup_logging(logging.WARNING)
    else:
        setup_logging(logging.INFO)

    if not args.quiet:
        print_banner()

    try:
        if args.mode == 'run':
            await run_engine_mode(args)
        elif args.mode == 'status':
            run_status_mode(args)
        else:
            print(f"❌ Unknown mode: {args.mode}")
            parser.print_help()
            sys.exit(1)

    except KeyboardInterrupt:
        print("\n👋 Shutdown requested by user")
    except Exception as e:
        print(f"❌ Fatal error: {e}")
        sys.exit(1)


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
