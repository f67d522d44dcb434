#!/usr/bin/env python3
"""
Push exporter demo.

Records a loop counter and a latency distribution, then pushes them to a
push gateway once per interval.
"""

import argparse
import logging
import random
import time

from ocpush import PushExporter, count, distribution, float_measure, int_measure, new_view, tag_scope
from ocpush.utils.logging import setup_logging

LOOP_COUNT = int_measure("loop_count", "Number of loop iterations")
LOOP_LATENCY = float_measure("loop_latency", "Loop latency", "ms")


def main():
    parser = argparse.ArgumentParser(description="Push exporter demo")
    parser.add_argument("--namespace", default="demo")
    parser.add_argument("--push-addr", default="http://localhost")
    parser.add_argument("--push-port", default="9091")
    parser.add_argument("--job", default="ocpush_demo")
    parser.add_argument("--instance", default="")
    parser.add_argument("--iterations", type=int, default=20)
    parser.add_argument("--interval", type=float, default=2.0)
    args = parser.parse_args()

    setup_logging(logging.DEBUG)

    with PushExporter(args.namespace, args.push_addr, args.push_port, args.job) as exporter:
        if args.instance:
            exporter.set_instance(args.instance)
        exporter.register_views(
            new_view("loops", LOOP_COUNT, count(), "Loop iterations", ["worker"]),
            new_view("loop_latency", LOOP_LATENCY, distribution([5, 10, 50, 100]), "Loop latency", ["worker"]),
        )
        exporter.start(interval_seconds=args.interval)

        for i in range(args.iterations):
            with tag_scope(worker=f"w{i % 2}"):
                exporter.record([LOOP_COUNT.m(1), LOOP_LATENCY.m(random.uniform(1, 120))])
            time.sleep(0.2)

        exporter.push_metrics()


if __name__ == "__main__":
    main()
