"""
scanner - 安全掃描輔助

兩種掃描方式，結果都是 SecurityScanResult：
    SecurityHeuristicChecker - 對已載入頁面做被動檢查（HTTPS、標頭、敏感資料...）
    ZapScanner               - 透過 OWASP ZAP API 跑 spider + active scan

其他：
    ZapSession - ZAP daemon 啟動 / 收尾與報告
    probes     - 對登入頁送出 SQLi / XSS payload 等主動探測
    report     - Markdown / JSON / HTML 報告
"""
