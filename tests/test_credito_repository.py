from datetime import date, timedelta
from itertools import product

import pytest

from app.core.pagination import PageRequest, normalize_page_request
from app.repositories.credito_repository import CreditoFiltros, CreditoRepository, build_predicates


@pytest.fixture
def repo(db):
    return CreditoRepository(db)


@pytest.fixture
def base_filtros(criar_credito):
    """Eight credits covering every (nfse, tipo, simples) combination, plus one with simples NULL."""
    criados = []
    for i, (nfse, tipo, simples) in enumerate(product(("111", "222"), ("ISSQN", "ICMS"), (True, False))):
        criados.append(
            criar_credito(
                numero_nfse=nfse,
                tipo_credito=tipo,
                simples_nacional=simples,
                data_constituicao=date(2024, 1, 1) + timedelta(days=i),
            )
        )
    criados.append(criar_credito(numero_nfse="111", tipo_credito="ISSQN", simples_nacional=None))
    return criados


def test_predicados_apenas_para_filtros_presentes():
    assert build_predicates(CreditoFiltros()) == []
    assert len(build_predicates(CreditoFiltros(numero_nfse="1"))) == 1
    assert len(build_predicates(CreditoFiltros(tipo_credito="ISS", simples_nacional=False))) == 2
    assert len(build_predicates(CreditoFiltros("1", "ISS", True))) == 3


def test_filtros_vazios():
    assert CreditoFiltros().is_empty
    assert not CreditoFiltros(simples_nacional=False).is_empty


@pytest.mark.parametrize(
    "numero_nfse,tipo_credito,simples_nacional",
    list(product((None, "111", "222", "999"), (None, "ISSQN", "ICMS"), (None, True, False))),
)
def test_filtro_inclui_exatamente_os_que_casam(repo, base_filtros, numero_nfse, tipo_credito, simples_nacional):
    filtros = CreditoFiltros(numero_nfse, tipo_credito, simples_nacional)
    esperados = {
        c.numero_credito
        for c in base_filtros
        if (numero_nfse is None or c.numero_nfse == numero_nfse)
        and (tipo_credito is None or c.tipo_credito == tipo_credito)
        and (simples_nacional is None or c.simples_nacional == simples_nacional)
    }

    page = repo.find_page_by_filters(filtros, PageRequest(page=0, size=100))

    assert {c.numero_credito for c in page.content} == esperados
    assert page.total_elements == len(esperados)


def test_sem_filtros_equivale_a_consulta_sem_restricao(repo, base_filtros):
    page = repo.find_page_by_filters(CreditoFiltros(), PageRequest(page=0, size=100))
    assert page.total_elements == len(base_filtros)


def test_paginado_por_nfse_ordena_por_data_desc(repo, criar_credito):
    for dia in (date(2024, 1, 1), date(2024, 3, 1), date(2024, 2, 1)):
        criar_credito(numero_nfse="555", data_constituicao=dia)

    page = repo.find_page_by_numero_nfse("555", normalize_page_request(0, 10))

    assert [c.data_constituicao for c in page.content] == [date(2024, 3, 1), date(2024, 2, 1), date(2024, 1, 1)]


def test_empate_de_data_desempata_por_id_desc(repo, criar_credito):
    primeiro = criar_credito(numero_nfse="556", data_constituicao=date(2024, 5, 5))
    segundo = criar_credito(numero_nfse="556", data_constituicao=date(2024, 5, 5))

    page = repo.find_page_by_numero_nfse("556", normalize_page_request(0, 10))

    assert [c.id for c in page.content] == [segundo.id, primeiro.id]


def test_paginas_cobrem_todo_o_conjunto_sem_repeticao(repo, criar_credito):
    for i in range(23):
        criar_credito(numero_nfse="777", data_constituicao=date(2023, 1, 1) + timedelta(days=i))

    vistos = []
    for numero in range(3):
        page = repo.find_page_by_numero_nfse("777", PageRequest(page=numero, size=10))
        assert page.total_elements == 23
        assert page.total_pages == 3
        vistos.extend(c.numero_credito for c in page.content)

    assert len(vistos) == 23
    assert len(set(vistos)) == 23


def test_pagina_alem_do_fim_vem_vazia(repo, criar_credito):
    criar_credito(numero_nfse="888")
    page = repo.find_page_by_numero_nfse("888", PageRequest(page=5, size=10))
    assert page.is_empty
    assert page.total_elements == 1


def test_busca_sem_paginacao_retorna_todos(repo, criar_credito):
    criados = {criar_credito(numero_nfse="123").numero_credito for _ in range(12)}
    criar_credito(numero_nfse="124")

    creditos = repo.find_by_numero_nfse("123")

    assert {c.numero_credito for c in creditos} == criados


def test_busca_sem_paginacao_vazia(repo):
    assert repo.find_by_numero_nfse("999999") == []


def test_busca_por_numero_credito(repo, criar_credito):
    criar_credito(numero_credito="ABC123", numero_nfse="1")
    credito = repo.find_by_numero_credito("ABC123")
    assert credito is not None
    assert credito.numero_nfse == "1"
    assert repo.find_by_numero_credito("NAOEXISTE") is None
