#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Projects manager (SQLite)

Commands:
  init                Create the schema and the operation log table; optionally seed categories
  menu                Interactive menu: add, list, select, update and delete projects (default)
  list                Print all projects as "id: name"
  show                Print one project with its materials, steps and categories

Notes:
- The database path comes from config.yaml (db_path) unless PROJECTS_DB_PATH is set.
- Every write made from the menu is also recorded in the operation_log table.
"""

import argparse
import logging
import os
import sys

from projects.db import ensure_schema, get_conn, get_db_path, read_config
from projects.exceptions import DbError, ProjectNotFoundError
from projects.logs import ensure_log_schema, setup_logging
from projects.services.project_svc import ProjectService
from projects.shell import ProjectsApp

logger = logging.getLogger("projects_app")

DEFAULT_CATEGORIES = ["Doors and Windows", "Repairs", "Gardening", "Woodworking"]


def _configure(args):
    if args.config:
        os.environ["PROJECTS_CONFIG"] = args.config
    cfg = read_config(args.config)
    setup_logging(cfg.get("log_level", "INFO"))
    logger.debug("using database %s", get_db_path(args.config))


# ---------------- Commands ----------------

def cmd_init(args):
    with get_conn() as conn:
        ensure_schema(conn)
        if args.seed_categories:
            for name in DEFAULT_CATEGORIES:
                conn.execute("INSERT OR IGNORE INTO category(category_name) VALUES(?)", (name,))
    ensure_log_schema()
    print("DB initialized at", get_db_path())


def cmd_menu(args):
    ensure_log_schema()
    ProjectsApp().run()


def cmd_list(args):
    for p in ProjectService().fetch_all_projects():
        print(f"   {p.project_id}: {p.project_name}")


def cmd_show(args):
    try:
        print(ProjectService().fetch_project_by_id(args.id))
    except ProjectNotFoundError as e:
        raise SystemExit(str(e))


# ---------------- Entry ----------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="Projects manager (SQLite)")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create schema and operation log")
    p_init.add_argument("--seed-categories", action="store_true", help="insert the default categories")
    p_init.set_defaults(func=cmd_init)

    p_menu = sub.add_parser("menu", help="interactive menu")
    p_menu.set_defaults(func=cmd_menu)

    p_list = sub.add_parser("list", help="list projects by name")
    p_list.set_defaults(func=cmd_list)

    p_show = sub.add_parser("show", help="show one project with its children")
    p_show.add_argument("--id", required=True, type=int)
    p_show.set_defaults(func=cmd_show)

    args = parser.parse_args(argv)
    _configure(args)
    func = getattr(args, "func", cmd_menu)
    try:
        func(args)
    except DbError as e:
        logger.error("database error: %s", e, exc_info=e.__cause__)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
