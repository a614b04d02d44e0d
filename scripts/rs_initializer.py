#!/usr/bin/env python3
import time
from collections import namedtuple
from pymongo.errors import OperationFailure, PyMongoError

# replSetGetStatus outcomes
Healthy = namedtuple("Healthy", "status")
NotInitialized = namedtuple("NotInitialized", "error")
Unreachable = namedtuple("Unreachable", "error")

READY = "READY"
READY_UNCONFIRMED = "READY_UNCONFIRMED"
UNREACHABLE = "UNREACHABLE"

ALREADY_INITIALIZED = 23
ROOT_ROLES = [{"role": "root", "db": "admin"}]

class InitiationError(Exception):
    pass

class ProvisionError(Exception):
    pass

def primary_member(status):
    return next((m for m in status.get("members", []) if m.get("stateStr") == "PRIMARY"), None)

class Initializer:
    def __init__(self, admin, settings, sleep=time.sleep):
        self.admin = admin
        self.settings = settings
        self.sleep = sleep

    def check_initialized(self):
        try:
            status = self.admin.command("replSetGetStatus")
        except OperationFailure as e:
            # NotYetInitialized (94) and friends: there is no config to report yet
            return NotInitialized(e)
        except PyMongoError as e:
            return Unreachable(e)
        if status and status.get("ok") == 1:
            return Healthy(status)
        return NotInitialized(None)

    def build_config(self):
        return {
            "_id": self.settings["rs_name"],
            "members": [{"_id": 0, "host": self.settings["host"]}],
        }

    def initiate(self, cfg_doc):
        print("Initializing replica set with config:", cfg_doc)
        try:
            res = self.admin.command("replSetInitiate", cfg_doc)
        except OperationFailure as e:
            if e.code == ALREADY_INITIALIZED or "already initialized" in str(e):
                print(f"Replica set already initialized; server rejected rs.initiate(): {e}")
                return None
            raise InitiationError(f"replSetInitiate failed: {e}") from e
        except PyMongoError as e:
            raise InitiationError(f"replSetInitiate failed: {e}") from e
        print("rs.initiate() result:", res)
        return res

    def await_primary(self, max_attempts=60, interval=1.0):
        """Poll replSetGetStatus until a member is PRIMARY.

        Failed polls count as "not ready yet". Sleeps only between attempts,
        so the wait never exceeds ``max_attempts * interval``.
        """
        last_err = None
        for attempt in range(1, max_attempts + 1):
            result = self.check_initialized()
            if isinstance(result, Healthy):
                primary = primary_member(result.status)
                if primary:
                    print("Replica set PRIMARY ready:", primary.get("name", self.settings["host"]))
                    return True
            elif result.error is not None:
                last_err = result.error
            if attempt < max_attempts:
                self.sleep(interval)
        print("Warning: timeout waiting for PRIMARY election.", ("Last error: %s" % last_err) if last_err else "")
        return False

    def provision_admin(self, username, password):
        if not (username and password):
            if username or password:
                print("Warning: set both MONGO_INITDB_ROOT_USERNAME and MONGO_INITDB_ROOT_PASSWORD to create an admin user; skipping.")
            return False
        print("Creating admin user...")
        try:
            self.admin.command("createUser", username, pwd=password, roles=ROOT_ROLES)
        except PyMongoError as e:
            raise ProvisionError(f"Error creating admin user '{username}': {e}") from e
        print(f"Admin user '{username}' created.")
        return True

    def run(self):
        s = self.settings
        result = self.check_initialized()
        if isinstance(result, Healthy):
            print(f"Replica set already initialized: {result.status.get('set')}")
            return READY
        if isinstance(result, Unreachable):
            print(f"Cannot reach database to check replica set status: {result.error}")
            return UNREACHABLE

        print(f"Initializing replica set '{s['rs_name']}'...")
        initiated = self.initiate(self.build_config()) is not None

        state = READY_UNCONFIRMED
        if s["await_primary"]:
            print("rs.initiate() sent; waiting for PRIMARY election...")
            if self.await_primary(s["max_attempts"], s["interval"]):
                state = READY

        if s["provision_admin"] and initiated:
            self.provision_admin(s.get("username"), s.get("password"))
        return state
