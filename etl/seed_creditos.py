from __future__ import annotations

import argparse
import random
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.config import settings
from app.core.logging import get_logger, setup_logging
from app.database import SessionLocal
from app.models.credito import Credito
from app.services.calculo_fiscal import calcular_base_calculo, calcular_valor_issqn

logger = get_logger(__name__)

TEST_PREFIX = "TESTE"
NFSE_COUNT = 10
CREDITOS_POR_NFSE = 30
TIPOS_CREDITO = ("ISS", "IPI", "ICMS", "PIS", "COFINS", "IR", "CSLL")

_CENTAVOS = Decimal("0.01")


def _money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(_CENTAVOS, rounding=ROUND_HALF_UP)


def build_test_records(rng: random.Random | None = None, today: date | None = None) -> list[Credito]:
    """TESTE_NFSE001..010, 30 credits each, numbered TESTE000001..TESTE000300."""
    rng = rng or random.Random()
    today = today or date.today()
    registros: list[Credito] = []

    for nfse_index in range(1, NFSE_COUNT + 1):
        numero_nfse = f"{TEST_PREFIX}_NFSE{nfse_index:03d}"

        for credito_index in range(1, CREDITOS_POR_NFSE + 1):
            global_index = (nfse_index - 1) * CREDITOS_POR_NFSE + credito_index

            valor_faturado = _money(rng.random() * 50000 + 1000)
            valor_deducao = (valor_faturado * _money(rng.random() * 0.3)).quantize(_CENTAVOS, rounding=ROUND_HALF_UP)
            aliquota = _money(rng.random() * 14 + 1)
            base_calculo = calcular_base_calculo(valor_faturado, valor_deducao)

            registros.append(
                Credito(
                    numero_credito=f"{TEST_PREFIX}{global_index:06d}",
                    numero_nfse=numero_nfse,
                    data_constituicao=today - timedelta(days=rng.randrange(365)),
                    valor_issqn=calcular_valor_issqn(base_calculo, aliquota),
                    tipo_credito=rng.choice(TIPOS_CREDITO),
                    simples_nacional=rng.choice((True, False)),
                    aliquota=aliquota,
                    valor_faturado=valor_faturado,
                    valor_deducao=valor_deducao,
                    base_calculo=base_calculo,
                )
            )

    return registros


def generate_test_records(db: Session, rng: random.Random | None = None) -> int:
    registros = build_test_records(rng)
    db.add_all(registros)
    db.commit()
    logger.info("seed.generated", registros=len(registros))
    return len(registros)


def delete_test_records(db: Session) -> int:
    condition = Credito.numero_credito.like(f"{TEST_PREFIX}%")
    quantidade = int(db.scalar(select(func.count()).select_from(Credito).where(condition)) or 0)
    db.execute(delete(Credito).where(condition))
    db.commit()
    logger.info("seed.deleted", registros=quantidade)
    return quantidade


def run(action: str) -> int:
    if not settings.TEST_FEATURES_ENABLED:
        raise RuntimeError("Dados de teste desabilitados neste ambiente (TEST_FEATURES_ENABLED=false)")

    with SessionLocal() as db:
        if action == "generate":
            return generate_test_records(db)
        return delete_test_records(db)


if __name__ == "__main__":
    setup_logging()
    parser = argparse.ArgumentParser(description="Gera ou remove creditos de teste (prefixo TESTE)")
    parser.add_argument("action", choices=("generate", "delete"))
    args = parser.parse_args()
    print(run(args.action))
