"""
服务层：简历解析与匹配、问卷评分、邮件收发、批量筛选、招聘会统计等业务逻辑
"""
