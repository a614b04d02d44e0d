#!/usr/bin/env python3
import argparse, time
from pymongo import MongoClient
from rs_bootstrap_config import load_settings, mask_uri
from rs_initializer import Initializer

def connect(uri, timeout_ms=5000):
    return MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Initialize a single-node replica set and optional root user")
    p.add_argument("--profile", choices=["local", "remote"], help="bootstrap variant (default: local)")
    p.add_argument("--config", help="YAML settings file (default: mongo_bootstrap.yml next to this script)")
    p.add_argument("--uri", help="connection URI of the node to initialize")
    p.add_argument("--rs-name", dest="rs_name", help="replica set name")
    p.add_argument("--host", help="host:port advertised for member 0")
    p.add_argument("--max-attempts", dest="max_attempts", type=int, help="PRIMARY polling attempts")
    p.add_argument("--interval", type=float, help="seconds between polling attempts")
    return p.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    client = None
    try:
        settings = load_settings(
            profile=args.profile,
            config_path=args.config,
            overrides={
                "uri": args.uri,
                "rs_name": args.rs_name,
                "host": args.host,
                "max_attempts": args.max_attempts,
                "interval": args.interval,
            },
        )
        print(f"Bootstrapping replica set '{settings['rs_name']}' via {mask_uri(settings['uri'])} (profile: {settings['profile']})")
        client = connect(settings["uri"], settings["server_selection_timeout_ms"])
        state = Initializer(client.admin, settings, sleep=time.sleep).run()
        print(f"Replica set bootstrap finished: {state}")
    except Exception as e:
        # a failed bootstrap must never stop the container from starting
        print(f"Init replica error: {e}")
    finally:
        if client is not None:
            client.close()
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
