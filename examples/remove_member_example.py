#!/usr/bin/env python3
"""
Remove a User from a Boundary Group

Runs the removal job locally against a Boundary controller, the way the
job framework would invoke it.

Environment:
    ADDRESS           Controller address (e.g. https://boundary.example.com)
    BASIC_USERNAME    Login name for the password auth method
    BASIC_PASSWORD    Password for the password auth method

Usage:
    python remove_member_example.py <groupId> <userId> <authMethodId>
"""

import json
import signal
import sys

from groupremover import GroupRemoverError, JobContext, invoke


def main() -> int:
    if len(sys.argv) != 4:
        print(__doc__)
        return 2

    group_id, user_id, auth_method_id = sys.argv[1:]
    context = JobContext.from_environ()

    # Ctrl-C asks the job to stop at the next step boundary
    signal.signal(signal.SIGINT, lambda *_: context.request_halt("interrupted"))

    try:
        result = invoke(
            {"groupId": group_id, "userId": user_id, "authMethodId": auth_method_id},
            context,
        )
    except GroupRemoverError as e:
        print(f"{e.kind.value}: {e.message}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
