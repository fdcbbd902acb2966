from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
CEM = Decimal("100")
_CENTAVOS = Decimal("0.01")
_QUATRO_CASAS = Decimal("0.0001")


def calcular_base_calculo(valor_faturado: Decimal | None, valor_deducao: Decimal | None) -> Decimal:
    if valor_faturado is None or valor_deducao is None:
        return ZERO
    if valor_faturado < ZERO:
        raise ValueError("Valor faturado nao pode ser negativo")
    if valor_deducao < ZERO:
        raise ValueError("Valor deducao nao pode ser negativo")
    if valor_deducao > valor_faturado:
        raise ValueError("Valor deducao nao pode ser maior que valor faturado")
    return valor_faturado - valor_deducao


def calcular_valor_issqn(base_calculo: Decimal | None, aliquota: Decimal | None) -> Decimal:
    """ISS = base de calculo * (aliquota / 100), arredondado para centavos."""
    if base_calculo is None or aliquota is None:
        return ZERO
    if base_calculo < ZERO:
        raise ValueError("Base de calculo nao pode ser negativa")
    if aliquota < ZERO:
        raise ValueError("Aliquota nao pode ser negativa")
    fator = (aliquota / CEM).quantize(_QUATRO_CASAS, rounding=ROUND_HALF_UP)
    return (base_calculo * fator).quantize(_CENTAVOS, rounding=ROUND_HALF_UP)


def aliquota_valida(aliquota: Decimal | None, minimo: Decimal = ZERO, maximo: Decimal = CEM) -> bool:
    if aliquota is None:
        return False
    return minimo <= aliquota <= maximo
