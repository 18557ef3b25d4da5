# app/cli.py
"""
운영용 CLI

관리자 권한은 회원가입 로직이 아니라 이 명령으로만 부여한다.
사용: python -m app.cli create-admin --email admin@example.com --password ...
"""
import click

from app.core.exceptions import ValidationFailedError
from app.database import SessionLocal
from app.services import user_service


@click.group()
def cli():
    """Ballot 운영 명령"""


@cli.command("create-admin")
@click.option("--email", required=True, help="관리자 이메일")
@click.option("--name", default=None, help="표시 이름 (기본: 이메일 앞부분)")
@click.option("--password", default=None, help="새 계정이면 필수, 기존 계정이면 선택")
def create_admin(email, name, password):
    """관리자 생성 또는 기존 유저 승격"""
    db = SessionLocal()
    try:
        user, created = user_service.provision_admin(db, email, name=name, password=password)
    except ValidationFailedError as e:
        raise click.ClickException(e.message)
    finally:
        db.close()

    if created:
        click.echo(f"관리자 계정 생성: {email}")
    else:
        click.echo(f"기존 계정을 관리자로 승격: {email}")


if __name__ == "__main__":
    cli()
