import dataclasses

import pytest

from app.core.pagination import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT,
    MAX_PAGE_SIZE,
    Page,
    PageRequest,
    normalize_page_request,
)


@pytest.mark.parametrize("size", [0, -1, -10, -(2**31)])
def test_size_nao_positivo_volta_para_padrao(size):
    assert normalize_page_request(0, size).size == DEFAULT_PAGE_SIZE == 10


@pytest.mark.parametrize("size", [101, 150, 1000, 2**31 - 1])
def test_size_acima_do_maximo_e_limitado(size):
    assert normalize_page_request(0, size).size == MAX_PAGE_SIZE == 100


@pytest.mark.parametrize("size", [1, 2, 10, 57, 99, 100])
def test_size_dentro_do_intervalo_e_mantido(size):
    assert normalize_page_request(0, size).size == size


@pytest.mark.parametrize("page", [-1, -3, -1000])
def test_pagina_negativa_vira_zero(page):
    assert normalize_page_request(page, 10).page == 0


def test_pagina_positiva_e_mantida():
    assert normalize_page_request(7, 10).page == 7


def test_parametros_invalidos_equivalem_ao_padrao():
    assert normalize_page_request(-3, 0) == normalize_page_request(0, 10)


def test_ordenacao_fixa_por_data_desc():
    request = normalize_page_request(2, 25)
    assert request.sort == DEFAULT_SORT
    assert request.sort.field == "data_constituicao"
    assert request.sort.descending


def test_offset():
    assert PageRequest(page=3, size=20).offset == 60


def test_page_request_imutavel():
    with pytest.raises(dataclasses.FrozenInstanceError):
        PageRequest().page = 5  # type: ignore[misc]


def test_pagina_unica_com_todos_os_elementos():
    page = Page(content=("a", "b", "c"), page=0, size=10, total_elements=3)
    assert page.total_pages == 1
    assert page.first and page.last
    assert not page.has_next
    assert not page.has_previous


def test_ultima_pagina_parcial():
    page = Page(content=tuple(range(5)), page=1, size=10, total_elements=15)
    assert page.total_pages == 2
    assert page.number_of_elements == 5
    assert not page.first
    assert page.last
    assert not page.has_next
    assert page.has_previous


def test_pagina_do_meio():
    page = Page(content=tuple(range(10)), page=1, size=10, total_elements=35)
    assert page.total_pages == 4
    assert page.has_next and page.has_previous
    assert not page.first and not page.last


def test_resultado_vazio_e_primeira_e_ultima():
    page = Page(content=(), page=0, size=10, total_elements=0)
    assert page.is_empty
    assert page.total_pages == 0
    assert page.first and page.last
    assert not page.has_next and not page.has_previous


def test_resultado_vazio_em_pagina_alta_continua_primeira_e_ultima():
    page = Page(content=(), page=4, size=10, total_elements=0)
    assert page.first and page.last
    assert not page.has_previous


def test_pagina_alem_do_fim_tem_anterior_mas_nao_proxima():
    page = Page(content=(), page=5, size=10, total_elements=15)
    assert page.is_empty
    assert page.has_previous and not page.has_next


@pytest.mark.parametrize(
    "page_number,size,total",
    [(0, 10, 1), (0, 10, 10), (0, 10, 11), (1, 10, 11), (2, 5, 14), (0, 100, 250), (2, 100, 250)],
)
def test_flags_de_navegacao_coerentes(page_number, size, total):
    page = Page(content=("x",), page=page_number, size=size, total_elements=total)
    assert page.has_next == (not page.last)
    assert page.has_previous == (not page.first)
    assert page.first == (page_number == 0)
    assert page.last == (page_number == page.total_pages - 1)
