#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Cria banco de dados SQLite
3. Executa migrations
4. Cria dados de exemplo (opcional): template do cartão de abertura
   e uma lista de plantão para o time informado

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data --team-id team-1
"""

import os
import sys
import argparse

# Adicionar raiz do projeto ao path (imports "src.")
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    # Sem DATABASE_URL postgres, settings usa SQLite
    os.environ.pop('DATABASE_URL', None)

    import django
    django.setup()


def run_migrations():
    """Executa migrations."""
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def create_sample_data(team_id: str):
    """Cria template de abertura e lista de plantão de exemplo."""
    from src.adapters.django_app.helpdesk.repositories import (
        DjangoRosterRepository,
        DjangoTemplateProvider,
    )
    from src.core.roster.engine import update_roster
    from src.core.roster.entities import ExpertRef, OnCallRosterRecord
    from src.core.shared.values import Identity
    from src.core.tickets.intake import CardConfiguration, FieldSpec, InputKind

    print("📝 Criando template do cartão de abertura...")
    DjangoTemplateProvider().save(
        CardConfiguration(
            card_id='default',
            team_id=team_id,
            fields=[
                FieldSpec(id='Location', label='Location', input_kind=InputKind.TEXT_INPUT),
                FieldSpec(id='DueDate', label='Due date', input_kind=InputKind.DATE_INPUT),
            ],
        )
    )
    print("   ✓ cardId=default (Location, DueDate)")

    print("📝 Criando lista de plantão...")
    roster_repo = DjangoRosterRepository()
    current = roster_repo.get_current(team_id) or OnCallRosterRecord.new_for_team(team_id)
    record = update_roster(
        current,
        [
            ExpertRef(object_id='expert-001', name='Ana Souza', email='ana@example.com'),
            ExpertRef(object_id='expert-002', name='Bruno Lima', email='bruno@example.com'),
        ],
        Identity(name='quick_setup'),
    )
    roster_repo.append(record)
    print(f"   ✓ time {team_id}: {', '.join(e.name for e in record.experts)}")

    print("✅ Dados de exemplo criados!")


def check_connection():
    """Verifica conexão com o banco."""
    from django.db import connection

    print("🔍 Verificando conexão com o banco...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("✅ Conexão OK!")
        return True
    except Exception as e:
        print(f"❌ Erro de conexão: {e}")
        return False


def show_info():
    """Mostra informações do setup."""
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Cache Backend: {settings.CACHES['default']['BACKEND']}")
    print(f"  Canal SME: {settings.HELPDESK['SME_CONVERSATION_ID']}")
    print(f"  Debug Mode: {settings.DEBUG}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. django-admin runserver --settings=src.config.settings --pythonpath=.")
    print("   2. POST http://localhost:8000/api/messages/")
    print("   3. GET  http://localhost:8000/api/roster/<team_id>/")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Criar dados de exemplo'
    )
    parser.add_argument(
        '--team-id',
        default='team-1',
        help='Time da lista de plantão de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 Remote Support Bot - Quick Setup")
    print("=" * 60 + "\n")

    # Configurar Django
    setup_django()

    if args.check_only:
        check_connection()
        return

    # Verificar conexão
    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está acessível.")
        return

    # Executar migrations
    run_migrations()

    # Criar dados de exemplo
    if args.with_sample_data:
        create_sample_data(args.team_id)

    # Mostrar informações
    show_info()


if __name__ == '__main__':
    main()
