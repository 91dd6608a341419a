import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from cnab_cobranca.exceptions import CnabStructuralError, CnabValidationError
from cnab_cobranca.formatacao import (
    agora_brt,
    apenas_digitos,
    formatar_data,
    formatar_valor,
    ler_data,
    ler_inteiro,
    ler_valor,
    normalizar_texto,
    pad_left,
    pad_right,
    para_centavos,
)


class TestDatas:
    def test_formatar_ddmmaaaa(self):
        assert formatar_data(date(2025, 3, 5)) == "05032025"

    def test_formatar_none(self):
        assert formatar_data(None) == "00000000"

    def test_formatar_datetime(self):
        assert formatar_data(datetime(2024, 12, 31, 23, 59)) == "31122024"

    def test_ler_inverso(self):
        assert ler_data("05032025") == date(2025, 3, 5)

    def test_ler_zeros_e_brancos(self):
        assert ler_data("00000000") is None
        assert ler_data("        ") is None

    def test_mes_13_falha(self):
        """Componentes invalidos nao podem ser normalizados silenciosamente."""
        with pytest.raises(CnabValidationError):
            ler_data("01132025")

    def test_dia_31_de_fevereiro_falha(self):
        with pytest.raises(CnabValidationError):
            ler_data("31022025")

    def test_caracteres_nao_numericos(self):
        with pytest.raises(CnabStructuralError):
            ler_data("01/03/25")


class TestValores:
    def test_centavos_padrao_15(self):
        assert formatar_valor(Decimal("1234.56")) == "000000000123456"

    def test_largura_informada(self):
        assert formatar_valor(Decimal("1.00"), 10) == "0000000100"

    def test_arredondamento_meio_para_cima(self):
        assert para_centavos(Decimal("0.005")) == 1
        assert para_centavos(Decimal("2.345")) == 235

    def test_float_nao_perde_centavo(self):
        assert para_centavos(1234.56) == 123456
        assert para_centavos(0.1 + 0.2) == 30

    def test_negativo_falha(self):
        with pytest.raises(CnabValidationError, match="negativo"):
            formatar_valor(Decimal("-1.00"))

    def test_estouro_de_largura_falha(self):
        with pytest.raises(CnabValidationError, match="nao cabe"):
            formatar_valor(Decimal("100000000.00"), 10)

    def test_valor_nao_numerico_falha(self):
        with pytest.raises(CnabValidationError):
            para_centavos("abc")

    def test_ler_valor(self):
        assert ler_valor("000000000010000") == Decimal("100.00")
        assert str(ler_valor("000000000000250")) == "2.50"

    def test_ler_valor_brancos(self):
        assert ler_valor("     ") == Decimal("0.00")

    def test_ler_valor_invalido(self):
        with pytest.raises(CnabStructuralError):
            ler_valor("00000000001A000")

    def test_ler_inteiro(self):
        assert ler_inteiro("000123") == 123
        assert ler_inteiro("      ") == 0

    def test_digitos_unicode_rejeitados(self):
        with pytest.raises(CnabStructuralError):
            ler_valor("00000000001\u0663000")
        with pytest.raises(CnabStructuralError):
            ler_inteiro("00012\u00b2")
        with pytest.raises(CnabStructuralError):
            ler_data("0103202\u0665")


class TestNormalizarTexto:
    def test_remove_acentos_e_maiusculas(self):
        assert normalizar_texto("José da Conceição") == "JOSE DA CONCEICAO"

    def test_remove_pontuacao(self):
        assert normalizar_texto("Rua Teste, 123 - Apto. 4") == "RUA TESTE 123  APTO 4"

    def test_remove_caracteres_fora_do_ascii(self):
        assert normalizar_texto("Açaí № 1 ü") == "ACAI  1 U"

    def test_none_vira_vazio(self):
        assert normalizar_texto(None) == ""


class TestPad:
    def test_pad_left_completa_com_zeros(self):
        assert pad_left("123", 6) == "000123"

    def test_pad_left_corta_no_tamanho(self):
        assert pad_left("1234567", 5) == "12345"

    def test_pad_left_inteiro(self):
        assert pad_left(7, 4) == "0007"

    def test_pad_right_completa_com_espacos(self):
        assert pad_right("AB", 5) == "AB   "

    def test_pad_right_corta(self):
        assert pad_right("ABCDEFG", 3) == "ABC"

    def test_pad_right_none(self):
        assert pad_right(None, 3) == "   "

    def test_apenas_digitos(self):
        assert apenas_digitos("11.222.333/0001-81") == "11222333000181"
        assert apenas_digitos(None) == ""

    def test_apenas_digitos_descarta_digitos_unicode(self):
        assert apenas_digitos("12\u0663\u00b234") == "1234"


class TestAgoraBrt:
    def test_tzinfo_brt(self):
        dt = agora_brt()
        assert dt.utcoffset() == timedelta(hours=-3)

    def test_aproximadamente_agora(self):
        diff = abs((datetime.now(timezone.utc) - agora_brt()).total_seconds())
        assert diff < 60
