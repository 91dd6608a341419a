import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from cnab_cobranca.models import BankCode, BoletoData, CnabConfig, Sacado


# codigo de barras BB conferido a mao: fator 3737 (31/12/2007), valor 1,00
CODIGO_BARRAS_VALIDO = "00193373700000001000500940144816060680935031"
LINHA_DIGITAVEL_VALIDA = "00190.50095 40144.816069 06809.350314 3 37370000000100"

AGORA_FIXO = datetime(2025, 3, 10, 14, 30, 15, tzinfo=timezone(timedelta(hours=-3)))

SACADO_PADRAO = Sacado(
    nome="José da Conceição",
    documento="123.456.789-01",
    endereco="Rua das Flores, 100",
    bairro="Centro",
    cidade="São Paulo",
    uf="sp",
    cep="01310-100",
)


@pytest.fixture
def config_bb():
    return CnabConfig(
        banco=BankCode.BANCO_DO_BRASIL,
        agencia="1234",
        agencia_digito="5",
        conta="123456",
        conta_digito="7",
        convenio="1234567",
        carteira="17",
        cedente="Empresa Teste Ltda",
        cedente_documento="11.222.333/0001-81",
    )


@pytest.fixture
def boleto_padrao():
    return BoletoData(
        id="1",
        nosso_numero="12345678901",
        numero_documento="NF-1001",
        data_emissao=date(2025, 3, 1),
        data_vencimento=date(2025, 3, 31),
        valor=Decimal("1234.56"),
        sacado=SACADO_PADRAO,
    )


def montar_linha(campos: dict) -> str:
    """Monta uma linha CNAB de 240 posicoes. Chaves sao colunas 1-indexadas."""
    linha = [" "] * 240
    for inicio, texto in campos.items():
        linha[inicio - 1:inicio - 1 + len(texto)] = texto
    return "".join(linha)
