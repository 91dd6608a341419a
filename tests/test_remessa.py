import pytest
from datetime import date
from decimal import Decimal

from cnab_cobranca.remessa import gerar_remessa_cobranca, validar_cnab240
from cnab_cobranca.retorno import parse_retorno_cnab240
from cnab_cobranca.results import HeaderArquivo, HeaderLote, TrailerArquivo, TrailerLote

from tests.conftest import AGORA_FIXO


def _linhas(resultado):
    return resultado.conteudo.split("\r\n")


class TestRemessaVazia:
    def test_sucesso_sem_titulos(self, config_bb):
        resultado = gerar_remessa_cobranca(config_bb, [], 1, agora=AGORA_FIXO)
        assert resultado.sucesso is True
        assert resultado.total_registros == 0
        assert resultado.valor_total == 0
        assert resultado.erros == []

    def test_quatro_registros_estruturais(self, config_bb):
        linhas = _linhas(gerar_remessa_cobranca(config_bb, [], 1, agora=AGORA_FIXO))
        assert [linha[7] for linha in linhas] == ["0", "1", "5", "9"]
        assert all(len(linha) == 240 for linha in linhas)

    def test_trailers_zerados(self, config_bb):
        linhas = _linhas(gerar_remessa_cobranca(config_bb, [], 1, agora=AGORA_FIXO))
        assert linhas[2][17:23] == "000002"
        assert linhas[2][23:29] == "000000"
        assert linhas[2][29:46] == "0" * 17
        assert linhas[3][23:29] == "000004"


class TestRemessaComTitulo:
    def test_estrutura(self, config_bb, boleto_padrao):
        resultado = gerar_remessa_cobranca(config_bb, [boleto_padrao], 1, agora=AGORA_FIXO)
        linhas = _linhas(resultado)
        assert resultado.sucesso is True
        assert len(linhas) == 6
        assert all(len(linha) == 240 for linha in linhas)
        assert linhas[0][7] == "0"
        assert linhas[-1][7] == "9"
        assert [linha[13] for linha in linhas[2:4]] == ["P", "Q"]

    def test_crlf_sem_quebra_final(self, config_bb, boleto_padrao):
        conteudo = gerar_remessa_cobranca(config_bb, [boleto_padrao], 1, agora=AGORA_FIXO).conteudo
        assert conteudo.count("\r\n") == 5
        assert not conteudo.endswith("\r\n")

    def test_apenas_ascii(self, config_bb, boleto_padrao):
        conteudo = gerar_remessa_cobranca(config_bb, [boleto_padrao], 1, agora=AGORA_FIXO).conteudo
        conteudo.encode("ascii")

    def test_nome_do_arquivo(self, config_bb, boleto_padrao):
        resultado = gerar_remessa_cobranca(config_bb, [boleto_padrao], 42, agora=AGORA_FIXO)
        assert resultado.nome_arquivo == "CNAB240_001_20250310_000042.rem"

    def test_totais(self, config_bb, boleto_padrao):
        segundo = boleto_padrao.model_copy(update={"nosso_numero": "2", "valor": Decimal("0.44")})
        resultado = gerar_remessa_cobranca(config_bb, [boleto_padrao, segundo], 1, agora=AGORA_FIXO)
        assert resultado.total_registros == 2
        assert resultado.valor_total == Decimal("1235.00")
        linhas = _linhas(resultado)
        assert len(linhas) == 8
        assert linhas[-2][17:23] == "000006"
        assert linhas[-2][23:29] == "000002"
        assert linhas[-2][29:46] == "00000000000123500"
        assert linhas[-1][23:29] == "000008"
        assert [linha[8:13] for linha in linhas[2:6]] == ["00001", "00002", "00003", "00004"]

    def test_total_soma_centavos_arredondados(self, config_bb, boleto_padrao):
        boletos = [
            boleto_padrao.model_copy(update={"nosso_numero": str(i), "valor": Decimal("0.005")})
            for i in range(1, 4)
        ]
        resultado = gerar_remessa_cobranca(config_bb, boletos, 1, agora=AGORA_FIXO)
        linhas = _linhas(resultado)
        centavos_p = sum(int(linha[85:100]) for linha in linhas if linha[13] == "P")
        assert centavos_p == 3
        assert int(linhas[-2][29:46]) == centavos_p
        assert resultado.valor_total == Decimal("0.03")

    def test_total_arredonda_meio_para_cima(self, config_bb, boleto_padrao):
        boleto = boleto_padrao.model_copy(update={"valor": Decimal("10.125")})
        resultado = gerar_remessa_cobranca(config_bb, [boleto], 1, agora=AGORA_FIXO)
        assert resultado.valor_total == Decimal("10.13")
        assert _linhas(resultado)[-2][29:46] == "00000000000001013"


class TestHeaderArquivo:
    def test_campos(self, config_bb):
        linha = _linhas(gerar_remessa_cobranca(config_bb, [], 7, agora=AGORA_FIXO))[0]
        assert linha[0:3] == "001"
        assert linha[3:7] == "0000"
        assert linha[17] == "2"
        assert linha[18:32] == "11222333000181"
        assert linha[32:52] == "1234567".ljust(20)
        assert linha[52:57] == "01234"
        assert linha[57] == "5"
        assert linha[58:70] == "000000123456"
        assert linha[70] == "7"
        assert linha[72:102] == "EMPRESA TESTE LTDA".ljust(30)
        assert linha[102:132].strip() == "BANCO DO BRASIL SA"
        assert linha[142] == "1"
        assert linha[143:151] == "10032025"
        assert linha[151:157] == "143015"
        assert linha[157:163] == "000007"
        assert linha[163:166] == "087"

    def test_cedente_cpf(self, config_bb):
        config = config_bb.model_copy(update={"cedente_documento": "12345678901"})
        linha = _linhas(gerar_remessa_cobranca(config, [], 1, agora=AGORA_FIXO))[0]
        assert linha[17] == "1"
        assert linha[18:32] == "00012345678901"


class TestHeaderLote:
    def test_campos(self, config_bb):
        linha = _linhas(gerar_remessa_cobranca(config_bb, [], 7, agora=AGORA_FIXO))[1]
        assert linha[3:7] == "0001"
        assert linha[8] == "R"
        assert linha[9:11] == "01"
        assert linha[13:16] == "045"
        assert linha[18:33] == "011222333000181"
        assert linha[73:103] == "EMPRESA TESTE LTDA".ljust(30)
        assert linha[183:191] == "00000007"
        assert linha[191:199] == "10032025"


class TestSegmentoP:
    def _p(self, config, boleto):
        return _linhas(gerar_remessa_cobranca(config, [boleto], 1, agora=AGORA_FIXO))[2]

    def test_valor(self, config_bb, boleto_padrao):
        assert self._p(config_bb, boleto_padrao)[85:100] == "000000000123456"

    def test_campos(self, config_bb, boleto_padrao):
        linha = self._p(config_bb, boleto_padrao)
        assert linha[15:17] == "01"
        assert linha[37:57] == "12345678901".ljust(20)
        assert linha[57] == "1"
        assert linha[62:77] == "NF1001".ljust(15)
        assert linha[77:85] == "31032025"
        assert linha[106:108] == "02"
        assert linha[108] == "A"
        assert linha[109:117] == "01032025"
        assert linha[220] == "3"
        assert linha[223] == "1"
        assert linha[224:227] == "060"
        assert linha[227:229] == "09"

    def test_sem_juros_e_desconto(self, config_bb, boleto_padrao):
        linha = self._p(config_bb, boleto_padrao)
        assert linha[117:141] == "0" * 24
        assert linha[141:165] == "0" * 24

    def test_juros_por_dia(self, config_bb, boleto_padrao):
        boleto = boleto_padrao.model_copy(update={"valor_juros": Decimal("1.50")})
        linha = self._p(config_bb, boleto)
        assert linha[117] == "1"
        assert linha[118:126] == "01042025"
        assert linha[126:141] == "000000000000150"

    def test_desconto_ate_vencimento(self, config_bb, boleto_padrao):
        boleto = boleto_padrao.model_copy(update={"valor_desconto": Decimal("10")})
        linha = self._p(config_bb, boleto)
        assert linha[141] == "1"
        assert linha[142:150] == "31032025"
        assert linha[150:165] == "000000000001000"


class TestSegmentoQ:
    def test_sacado_normalizado(self, config_bb, boleto_padrao):
        linha = _linhas(gerar_remessa_cobranca(config_bb, [boleto_padrao], 1, agora=AGORA_FIXO))[3]
        assert linha[17] == "1"
        assert linha[18:33] == "000012345678901"
        assert linha[33:73] == "JOSE DA CONCEICAO".ljust(40)
        assert linha[73:113] == "RUA DAS FLORES 100".ljust(40)
        assert linha[113:128] == "CENTRO".ljust(15)
        assert linha[128:136] == "01310100"
        assert linha[136:151] == "SAO PAULO".ljust(15)
        assert linha[151:153] == "SP"

    def test_nome_longo_cortado(self, config_bb, boleto_padrao):
        sacado = boleto_padrao.sacado.model_copy(update={"nome": "A" * 60})
        boleto = boleto_padrao.model_copy(update={"sacado": sacado})
        linha = _linhas(gerar_remessa_cobranca(config_bb, [boleto], 1, agora=AGORA_FIXO))[3]
        assert len(linha) == 240
        assert linha[33:73] == "A" * 40


class TestFalhas:
    def test_valor_que_nao_cabe_vira_erro(self, config_bb, boleto_padrao):
        boleto = boleto_padrao.model_copy(update={"valor": Decimal("10000000000000.00")})
        resultado = gerar_remessa_cobranca(config_bb, [boleto], 1, agora=AGORA_FIXO)
        assert resultado.sucesso is False
        assert resultado.conteudo is None
        assert resultado.nome_arquivo is None
        assert resultado.erros and "nao cabe" in resultado.erros[0]

    def test_falha_e_logada(self, config_bb, boleto_padrao, caplog):
        boleto = boleto_padrao.model_copy(update={"valor": Decimal("10000000000000.00")})
        gerar_remessa_cobranca(config_bb, [boleto], 1, agora=AGORA_FIXO)
        assert "Falha ao gerar remessa" in caplog.text

    def test_excecao_inesperada_nao_escapa(self, config_bb):
        resultado = gerar_remessa_cobranca(config_bb, [object()], 1, agora=AGORA_FIXO)
        assert resultado.sucesso is False
        assert resultado.erros

    @pytest.mark.parametrize("sequencial", [0, -1, 1000000])
    def test_sequencial_fora_do_intervalo(self, config_bb, sequencial):
        resultado = gerar_remessa_cobranca(config_bb, [], sequencial, agora=AGORA_FIXO)
        assert resultado.sucesso is False
        assert "Sequencial do arquivo" in resultado.erros[0]

    def test_sequencial_maximo_aceito(self, config_bb):
        resultado = gerar_remessa_cobranca(config_bb, [], 999999, agora=AGORA_FIXO)
        assert resultado.sucesso is True
        assert resultado.nome_arquivo.endswith("_999999.rem")

    def test_captura_horario_uma_vez(self, config_bb):
        from unittest.mock import patch
        with patch("cnab_cobranca.remessa.agora_brt", return_value=AGORA_FIXO) as agora:
            resultado = gerar_remessa_cobranca(config_bb, [], 3)
        assert agora.call_count == 1
        assert resultado.nome_arquivo == "CNAB240_001_20250310_000003.rem"


class TestValidarCnab240:
    def test_remessa_gerada_e_valida(self, config_bb, boleto_padrao):
        conteudo = gerar_remessa_cobranca(config_bb, [boleto_padrao], 1, agora=AGORA_FIXO).conteudo
        resultado = validar_cnab240(conteudo)
        assert resultado.valido is True
        assert resultado.erros == []

    def test_menos_de_4_linhas(self):
        resultado = validar_cnab240("0" * 240 + "\r\n" + "9" * 240)
        assert resultado.valido is False
        assert resultado.erros == [
            "Arquivo deve ter no minimo 4 linhas "
            "(Header Arquivo, Header Lote, Trailer Lote, Trailer Arquivo)"
        ]

    def test_linha_com_tamanho_errado(self, config_bb):
        linhas = _linhas(gerar_remessa_cobranca(config_bb, [], 1, agora=AGORA_FIXO))
        linhas[1] = linhas[1][:200]
        resultado = validar_cnab240("\r\n".join(linhas))
        assert resultado.valido is False
        assert "Linha 2: Tamanho invalido (200 caracteres, esperado 240)" in resultado.erros

    def test_tipos_header_e_trailer(self, config_bb):
        linhas = _linhas(gerar_remessa_cobranca(config_bb, [], 1, agora=AGORA_FIXO))
        linhas[0], linhas[-1] = linhas[-1], linhas[0]
        resultado = validar_cnab240("\n".join(linhas))
        assert "Header de Arquivo: Tipo de registro invalido" in resultado.erros
        assert "Trailer de Arquivo: Tipo de registro invalido" in resultado.erros

    def test_banco_divergente(self, config_bb):
        linhas = _linhas(gerar_remessa_cobranca(config_bb, [], 1, agora=AGORA_FIXO))
        linhas[2] = "237" + linhas[2][3:]
        resultado = validar_cnab240("\r\n".join(linhas))
        assert resultado.valido is False
        assert any("linhas: 3" in e for e in resultado.erros)

    def test_total_de_registros_divergente(self, config_bb, boleto_padrao):
        linhas = _linhas(gerar_remessa_cobranca(config_bb, [boleto_padrao], 1, agora=AGORA_FIXO))
        del linhas[3]
        resultado = validar_cnab240("\r\n".join(linhas))
        assert resultado.valido is False
        assert any("total de registros 6" in e for e in resultado.erros)


class TestIdaEVolta:
    def test_retorno_le_estrutura_da_remessa(self, config_bb, boleto_padrao):
        """Os registros estruturais gerados sao lidos de volta pelo parser de retorno."""
        conteudo = gerar_remessa_cobranca(config_bb, [boleto_padrao], 9, agora=AGORA_FIXO).conteudo
        resultado = parse_retorno_cnab240(conteudo)
        assert resultado.sucesso is True
        assert resultado.banco == "001"
        tipos = [type(r) for r in resultado.registros]
        assert tipos == [HeaderArquivo, HeaderLote, TrailerLote, TrailerArquivo]
        header, lote, trailer_lote, trailer = resultado.registros
        assert header.data_geracao == date(2025, 3, 10)
        assert header.sequencial_arquivo == 9
        assert header.nome_empresa == "EMPRESA TESTE LTDA"
        assert lote.numero_retorno == 9
        assert lote.data_credito is None
        assert trailer_lote.quantidade_titulos == 1
        assert trailer_lote.valor_total == Decimal("1234.56")
        assert trailer.quantidade_registros == 6
