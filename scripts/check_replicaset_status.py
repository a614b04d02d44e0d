#!/usr/bin/env python3
import argparse, sys
from pymongo import MongoClient
from rs_bootstrap_config import ConfigError, load_settings, mask_uri
from rs_initializer import Healthy, Initializer, NotInitialized, primary_member

def report(status):
    """Print the member table; return True when the set is fully healthy."""
    print(f"Replica set: {status.get('set', '(unknown)')}")
    members = status.get("members", [])
    primary = primary_member(status)
    if primary:
        print(f"PRIMARY: {primary.get('name')}")
    else:
        print("PRIMARY: (none yet)")
    print("-" * 60)
    unhealthy = False
    for m in members:
        name = m.get("name")
        state = m.get("stateStr")
        health = "UP" if m.get("health", 0) == 1 else "DOWN"
        sync = m.get("syncSourceHost") or ""
        print(f"{name:<25} state={state:<10} health={health:<4} optime={m.get('optimeDate', '')} syncSourceHost={sync}")
        if state not in ("PRIMARY", "SECONDARY") or m.get("health", 0) != 1:
            unhealthy = True
    print("-" * 60)
    return bool(primary) and not unhealthy

def main(argv=None):
    p = argparse.ArgumentParser(description="Show replica set status")
    p.add_argument("--config", help="YAML settings file")
    p.add_argument("--uri", help="connection URI of the node to query")
    args = p.parse_args(argv)

    try:
        settings = load_settings(config_path=args.config, overrides={"uri": args.uri})
    except ConfigError as e:
        print(f"Config error: {e}")
        return 1

    client = MongoClient(settings["uri"], serverSelectionTimeoutMS=settings["server_selection_timeout_ms"])
    try:
        result = Initializer(client.admin, settings).check_initialized()
        if isinstance(result, NotInitialized):
            print(f"Replica set not initialized (queried via {mask_uri(settings['uri'])}): {result.error}")
            return 2
        if not isinstance(result, Healthy):
            print(f"Error getting status: {result.error}")
            return 1
        if not report(result.status):
            print("Replica set is not fully healthy.")
            return 2
        print("Replica set looks healthy.")
        return 0
    finally:
        client.close()

if __name__ == "__main__":
    sys.exit(main())
