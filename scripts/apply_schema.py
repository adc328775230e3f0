#!/usr/bin/env python3
"""
Apply the database schema to PostgreSQL
Connection settings come from Secrets Manager or DB_* environment variables
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

import psycopg

from shared.database import get_db_cursor, health_check

SCHEMA_FILE = Path(__file__).parent.parent / 'database' / 'schema.sql'


def read_sql_file(filepath):
    """Read SQL file and return content"""
    with open(filepath, 'r') as f:
        return f.read()


def split_statements(sql_content):
    """Strip comments and split SQL content into statements"""
    lines = []
    for line in sql_content.split('\n'):
        if '--' in line:
            line = line[:line.index('--')]
        line = line.strip()
        if line:
            lines.append(line)

    clean_sql = ' '.join(lines)
    return [s.strip() for s in clean_sql.split(';') if s.strip()]


def execute_sql(statements):
    """Execute statements one by one, continuing past failures"""
    results = []
    for i, statement in enumerate(statements, 1):
        print(f"\n[{i}/{len(statements)}] Executing statement...")
        preview = statement[:100]
        print(f"  {preview}..." if len(statement) > 100 else f"  {preview}")

        try:
            with get_db_cursor() as cursor:
                cursor.execute(statement)
            print("  ✅ Success")
            results.append({'statement': i, 'status': 'success'})
        except psycopg.Error as e:
            print(f"  ❌ Failed: {e}")
            results.append({'statement': i, 'status': 'error', 'error': str(e)})

    return results


def main():
    parser = argparse.ArgumentParser(description='Apply the ESL progress database schema')
    parser.add_argument('--schema', default=str(SCHEMA_FILE), help='Path to the schema file')
    parser.add_argument('--yes', action='store_true', help='Skip the confirmation prompt')
    args = parser.parse_args()

    print("=" * 80)
    print("Database Schema Migration")
    print("=" * 80)

    schema_file = Path(args.schema)
    if not schema_file.exists():
        print(f"❌ Schema file not found: {schema_file}")
        sys.exit(1)

    if not health_check():
        print("❌ Cannot connect to the database. Check DB_SECRET_NAME or the DB_* variables.")
        sys.exit(1)

    print(f"\n📄 Reading schema from: {schema_file}")
    statements = split_statements(read_sql_file(schema_file))
    print(f"📊 Found {len(statements)} SQL statements")

    if not args.yes:
        response = input("\n⚠️  Apply schema? (yes/no): ")
        if response.lower() != 'yes':
            print("❌ Migration cancelled")
            sys.exit(0)

    print("\n🚀 Starting migration...")
    results = execute_sql(statements)

    print("\n" + "=" * 80)
    print("Migration Summary")
    print("=" * 80)

    success_count = sum(1 for r in results if r['status'] == 'success')
    error_count = sum(1 for r in results if r['status'] == 'error')

    print(f"✅ Successful: {success_count}")
    print(f"❌ Failed: {error_count}")

    if error_count > 0:
        print("\n⚠️  Some statements failed. Check the output above for details.")
        sys.exit(1)

    print("\n🎉 Migration completed successfully!")


if __name__ == '__main__':
    main()
