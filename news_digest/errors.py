"""异常定义"""


class DigestError(Exception):
    """所有新闻摘要相关异常的基类"""


class FetchError(DigestError):
    """上游接口不可用或返回格式错误"""


class NoDataError(FetchError):
    """上游请求成功但没有返回任何新闻"""


class StoreReadError(DigestError):
    """已有摘要文件不存在或无法读取"""


class StoreWriteError(DigestError):
    """摘要文件写入失败"""


class ChannelConfigError(DigestError):
    """通知渠道未配置（缺少地址或凭证），调用方应静默跳过"""


class ChannelSendError(DigestError):
    """通知渠道发送失败"""
