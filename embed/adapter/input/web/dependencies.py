from config.settings import EmbedSettings, MonitorSettings
from embed.application.usecase.click_insights_usecase import ClickInsightsUseCase
from embed.application.usecase.embed_order_usecase import EmbedOrderUseCase
from embed.application.usecase.link_preview_usecase import LinkPreviewUseCase
from embed.infrastructure.client.link_preview_client import LinkPreviewClient
from embed.infrastructure.repository.click_event_repository_impl import ClickEventRepositoryImpl
from embed.infrastructure.repository.embed_repository_impl import EmbedRepositoryImpl

_embed_order_usecase: EmbedOrderUseCase | None = None
_click_insights_usecase: ClickInsightsUseCase | None = None
_link_preview_usecase: LinkPreviewUseCase | None = None


def get_embed_order_usecase() -> EmbedOrderUseCase:
    global _embed_order_usecase
    if _embed_order_usecase is None:
        _embed_order_usecase = EmbedOrderUseCase(EmbedRepositoryImpl())
    return _embed_order_usecase


def get_click_insights_usecase() -> ClickInsightsUseCase:
    global _click_insights_usecase
    if _click_insights_usecase is None:
        _click_insights_usecase = ClickInsightsUseCase(
            EmbedRepositoryImpl(),
            ClickEventRepositoryImpl(),
            lookback_days=EmbedSettings().click_lookback_days,
            tz=MonitorSettings().tzinfo,
        )
    return _click_insights_usecase


def get_link_preview_usecase() -> LinkPreviewUseCase:
    global _link_preview_usecase
    if _link_preview_usecase is None:
        _link_preview_usecase = LinkPreviewUseCase(LinkPreviewClient(EmbedSettings()))
    return _link_preview_usecase


def close_link_preview_usecase() -> None:
    """종료 시 진행 중인 미리보기 결과가 더 이상 반영되지 않도록 닫는다."""
    global _link_preview_usecase
    if _link_preview_usecase is not None:
        _link_preview_usecase.close()
        _link_preview_usecase = None
